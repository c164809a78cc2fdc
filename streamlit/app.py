import streamlit as st
import pandas as pd

from polity_analytics.resources.country_codes import CountryCodeRegistry
from polity_analytics.resources.sources import (
    get_cutoff_year,
    get_data_source_config,
    get_named_peers,
    get_target_code
)
from polity_analytics.utils.aggregation import compare_trends
from polity_analytics.utils.data_processing import (
    member_codes,
    normalize_membership,
    normalize_scores,
    resolve_membership_codes
)
from polity_analytics.utils.fetcher import RemoteFetcher
from polity_analytics.utils.plotting import ChartStyle, build_comparison_chart

st.set_page_config(
    page_title="Polity Trend Comparison",
    page_icon="🗳️",
    layout="wide",
    initial_sidebar_state="expanded"
)

st.title("🗳️ Polity Trend Comparison")
st.markdown("### Democracy scores of a country against its NATO peers")


@st.cache_resource
def load_registry() -> CountryCodeRegistry:
    return CountryCodeRegistry()


@st.cache_data(show_spinner="Downloading Polity scores...")
def load_raw_scores() -> pd.DataFrame:
    with RemoteFetcher() as fetcher:
        return fetcher.fetch_spreadsheet(get_data_source_config('polity')['url'])


@st.cache_data(show_spinner="Scraping NATO member list...")
def load_members() -> pd.DataFrame:
    source = get_data_source_config('nato')
    with RemoteFetcher() as fetcher:
        table = fetcher.fetch_html_table(source['url'], source['selector'], source['table_index'])
    members = normalize_membership(table, source['name_position'], source['date_position'])
    return resolve_membership_codes(members, load_registry())


try:
    registry = load_registry()
    members = load_members()
    raw_scores = load_raw_scores()

    # Sidebar filters
    st.sidebar.header("Filters")

    cutoff_year = st.sidebar.slider("First year", 1950, 2015, get_cutoff_year())
    scores = normalize_scores(raw_scores, cutoff_year=cutoff_year)

    available_codes = sorted(int(code) for code in scores['entity_code'].unique())
    label_for = lambda code: registry.code_to_name(code) or str(code)

    default_target = get_target_code()
    target_code = st.sidebar.selectbox(
        "Target country",
        available_codes,
        index=available_codes.index(default_target) if default_target in available_codes else 0,
        format_func=label_for
    )

    member_options = sorted(member_codes(members) - {target_code})
    named_peers = st.sidebar.multiselect(
        "Named peers",
        member_options,
        default=[code for code in get_named_peers() if code in member_options],
        format_func=label_for
    )

    joined_filter = st.sidebar.checkbox("Only members that joined by the first year", value=False)
    peer_codes = member_codes(members, joined_by=cutoff_year if joined_filter else None)
    invert_y = st.sidebar.checkbox("Invert score axis", value=False)

    comparison = compare_trends(scores, peer_codes, target_code, named_peers, registry)
    target_name = label_for(target_code)

    col1, col2, col3 = st.columns(3)

    with col1:
        latest = comparison.target.dropna().tail(1)
        st.metric(f"{target_name} latest score",
                  f"{int(latest['score'].iloc[0])}" if not latest.empty else "n/a")

    with col2:
        latest_avg = comparison.peer_average.tail(1)
        st.metric("Peer average latest",
                  f"{latest_avg['mean_score'].iloc[0]:.1f}" if not latest_avg.empty else "n/a")

    with col3:
        st.metric("Peers in average", len(comparison.peer_codes))

    style = ChartStyle(title=f"{target_name} vs. NATO average", invert_y=invert_y)
    fig = build_comparison_chart(comparison, target_name, style=style)
    st.plotly_chart(fig, use_container_width=True)

    unresolved = members.loc[members['entity_code'].isna(), 'entity_name'].tolist()
    if unresolved:
        st.warning(f"Member names without a country code (excluded): {', '.join(unresolved)}")

    st.subheader("Member list")
    st.dataframe(members, use_container_width=True)

except Exception as e:
    st.error(f"Data loading error: {str(e)}")
    st.info("The Polity spreadsheet or the archived NATO page could not be retrieved or parsed.")

    # Show error details for debugging
    st.subheader("Debug Information")
    st.code(f"Error: {str(e)}")
