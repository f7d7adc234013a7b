"""Section record of a parsed MediaWiki article."""

from dataclasses import dataclass
from typing import Mapping


@dataclass(frozen=True)
class Section:
    """One entry of the API's flat section list.

    A typical ``<s>`` element looks like::

        <s toclevel="2" level="3" line="Marginal densities" number="7.1"
           anchor="Marginal_densities" linkAnchor="Marginal_densities" index="9"/>

    ``toclevel`` is kept as delivered; the ToC builder validates it.
    """

    toclevel: str
    anchor: str = ""
    link_anchor: str = ""
    number: str = ""
    line: str = ""

    @classmethod
    def from_attributes(cls, attrs: Mapping[str, str]) -> "Section":
        anchor = attrs.get("anchor", "")
        return cls(
            toclevel=attrs.get("toclevel", ""),
            anchor=anchor,
            # Older MediaWiki releases only send "anchor"
            link_anchor=attrs.get("linkAnchor", anchor),
            number=attrs.get("number", ""),
            line=attrs.get("line", ""),
        )
