"""
Comparison settings shared by every comparison asset.

The target country, the named peers and the accession cutoff live in one
resource so that the target series, the peer average and the chart always
agree on which country is being compared.
"""

from typing import Iterable, List, Optional, Set

from dagster import ConfigurableResource

from .sources import get_named_peers, get_target_code


class ComparisonResource(ConfigurableResource):
    """Target and peer selection for one comparison run."""

    target_code: int = get_target_code()
    named_peers: List[int] = get_named_peers()
    joined_by: Optional[int] = None

    def peer_codes(self, members: Iterable[int]) -> Set[int]:
        """Member codes with the target removed."""
        return set(members) - {self.target_code}

    def named_peer_codes(self) -> List[int]:
        return [code for code in self.named_peers if code != self.target_code]
