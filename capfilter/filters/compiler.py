"""
capfilter Expression Compiler

Assembles attributes into one pcap-filter expression.

Attributes are grouped by section (VLAN nesting depth). Each tagged
section's fragment starts with exactly one "vlan" primitive, and libpcap
advances the link-layer offset by one tag for every "vlan" it meets in
the expression text, so section N's fields are always evaluated N tags
deep. Fragments are therefore emitted strictly from section 0 upwards.

pcap-filter gives "and" and "or" the same precedence (left associative),
so every multi-term fragment is parenthesised before it is joined.
"""

from dataclasses import dataclass, field
from typing import Iterable

import structlog

from capfilter.filters.attribute import Attribute
from capfilter.filters.errors import (
    CompileError,
    ExpressionExcludesAllPackets,
    UnsupportedVlanFilter,
)
from capfilter.filters.models import (
    REAL_TYPES,
    UNTAGGED_WITHOUT_OFFSET,
    AttributeType,
    Match,
)

logger = structlog.get_logger(__name__)


# Tautologies the emitter can produce: untagged or tagged is everything
REDUNDANT_EXPRESSIONS = frozenset({
    f"({UNTAGGED_WITHOUT_OFFSET}) or (vlan)",
})


def _is_grouped(text: str) -> bool:
    """Check if text is one parenthesised group, e.g. "(a or b)"."""
    if not (text.startswith("(") and text.endswith(")")):
        return False

    depth = 0
    for i, char in enumerate(text):
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0 and i != len(text) - 1:
                return False
    return depth == 0


def _group(text: str) -> str:
    """Parenthesise text unless it already is a single group."""
    return text if _is_grouped(text) else f"({text})"


# =============================================================================
# Section State
# =============================================================================


@dataclass
class SectionState:
    """Accumulated constraints for one VLAN nesting depth."""

    index: int
    excluded: bool = False
    match: Match | None = None
    terms: list[str] = field(default_factory=list)
    expression: str = ""

    @property
    def included(self) -> bool:
        return not self.excluded

    @property
    def filtered(self) -> bool:
        """Included and carrying at least one constraint."""
        return self.included and bool(self.expression)

    def exclude(self) -> None:
        """Exclude the whole section; its detail no longer matters."""
        self.excluded = True
        self.terms.clear()
        self.expression = ""

    def add(self, attribute: Attribute) -> None:
        """Fold an attribute's fragment into the section expression."""
        if not attribute.filter_string:
            return

        term = _group(attribute.filter_string)
        if self.expression:
            joiner = " and " if attribute.required else " or "
            self.expression = f"{self.expression}{joiner}{term}"
        else:
            self.expression = term
        self.terms.append(term)

    def grouped_expression(self) -> str:
        """The section expression as a single group."""
        return self.expression if len(self.terms) == 1 else _group(self.expression)


# =============================================================================
# Compiler
# =============================================================================


class ExpressionCompiler:
    """
    Compiles an ordered attribute collection into a pcap-filter expression.

    Args:
        vlan_supported: Whether the capture interface can carry VLAN tags.
            Loopback and tunnel interfaces cannot, in which case only
            section 0 is meaningful.
    """

    def __init__(self, vlan_supported: bool = True) -> None:
        self.vlan_supported = vlan_supported

    def compile(self, attributes: Iterable[Attribute]) -> str:
        """
        Build the filter expression.

        Returns:
            The expression; an empty string means "capture everything"

        Raises:
            UnsupportedVlanFilter: VLAN semantics on an interface without tags
            ExpressionExcludesAllPackets: Nothing would ever match
        """
        attributes = list(attributes)

        for attribute in attributes:
            if attribute.is_preset:
                return self._compile_preset(attribute)

        sections = self._group_sections(attributes)
        if not sections:
            return ""

        ordered = self._fill_sections(sections)
        expression = self._emit(ordered)

        if expression in REDUNDANT_EXPRESSIONS:
            expression = ""

        logger.debug(
            "expression_compiled",
            attributes=len(attributes),
            sections=len(ordered),
            vlan_supported=self.vlan_supported,
            expression=expression,
        )
        return expression

    # =========================================================================
    # Step 1: Presets
    # =========================================================================

    def _compile_preset(self, attribute: Attribute) -> str:
        preset = attribute.operator
        logger.debug("preset_selected", preset=preset.value, vlan_supported=self.vlan_supported)

        if preset == Match.ANY:
            return ""
        if preset == Match.UNTAGGED:
            # Without tag support every packet is already untagged
            return "not vlan" if self.vlan_supported else ""
        if preset == Match.TAGGED:
            if not self.vlan_supported:
                raise UnsupportedVlanFilter(
                    "The tagged preset needs an interface that carries VLAN tags"
                )
            return "vlan"

        raise CompileError(f"Unsupported preset '{preset.value}'")

    # =========================================================================
    # Steps 2-3: Section Grouping
    # =========================================================================

    def _group_sections(self, attributes: list[Attribute]) -> dict[int, SectionState]:
        sections: dict[int, SectionState] = {}

        for attribute in attributes:
            state = sections.get(attribute.section)
            if state is not None and state.excluded:
                continue
            if state is None:
                state = sections[attribute.section] = SectionState(attribute.section)

            if attribute.type == AttributeType.SECTION_MATCH:
                state.match = attribute.operator
                if attribute.operator == Match.NONE:
                    state.exclude()
            elif attribute.type in REAL_TYPES:
                state.add(attribute)
            elif attribute.type == AttributeType.ATTRIBUTE_PRESET:
                raise CompileError(
                    f"Preset attribute outside the preset section: {attribute!r}"
                )
            else:
                raise CompileError(f"Unsupported attribute type '{attribute.type.value}'")

        return sections

    @staticmethod
    def _fill_sections(sections: dict[int, SectionState]) -> list[SectionState]:
        """Sections never mentioned below the deepest one are excluded."""
        last = max(sections)
        return [
            sections.get(index) or SectionState(index, excluded=True)
            for index in range(last + 1)
        ]

    # =========================================================================
    # Steps 4-5: Emission
    # =========================================================================

    def _emit(self, ordered: list[SectionState]) -> str:
        last_excluded = max((s.index for s in ordered if s.excluded), default=-1)
        last_included = max((s.index for s in ordered if s.included), default=-1)
        last_filtered = max((s.index for s in ordered if s.filtered), default=-1)

        untagged = ""
        chain: list[tuple[str, str]] = []
        previous: SectionState | None = None

        for state in ordered:
            if state.index > 0 and not self.vlan_supported:
                break

            fragment, terminal = self._fragment(
                state, last_excluded, last_included, last_filtered
            )

            if state.index == 0:
                untagged = fragment
            else:
                join = self._join(previous, state) if previous is not None else ""
                chain.append((join, fragment))
                previous = state

            if terminal:
                break

        if len(chain) > 1:
            # Negation binds tightest, bare "vlan"/"not vlan" need no group
            tagged = "".join(
                join + (_group(fragment) if " and " in fragment else fragment)
                for join, fragment in chain
            )
        else:
            tagged = "".join(fragment for _, fragment in chain)

        if untagged and tagged:
            boundary = " or " if last_included > 0 else " and "
            return f"{_group(untagged)}{boundary}{_group(tagged)}"
        return untagged or tagged

    @staticmethod
    def _join(previous: SectionState, current: SectionState) -> str:
        """
        Operator between two consecutive tagged fragments.

        Excluded sections pass through with "and", an all_of section joins
        with "and" on both sides, anything else is an alternative ("or").
        """
        if current.excluded or previous.excluded:
            return " and "
        if Match.ALL_OF in (previous.match, current.match):
            return " and "
        return " or "

    def _fragment(
        self,
        state: SectionState,
        last_excluded: int,
        last_included: int,
        last_filtered: int,
    ) -> tuple[str, bool]:
        """
        Fragment for one section.

        Returns:
            (fragment, terminal); no section after a terminal one is emitted
        """
        index = state.index

        if state.excluded:
            if last_included > index:
                if index == 0:
                    # A later tagged section already rules out untagged packets
                    if not self.vlan_supported:
                        raise UnsupportedVlanFilter(
                            "Excluding untagged traffic needs an interface that "
                            "carries VLAN tags"
                        )
                    return "", False
                # Step over this tag and require the next section
                return "vlan", False

            if index == 0:
                # Excluding only untagged traffic means "any tagged packet"
                if last_excluded == 0 and self.vlan_supported:
                    return "vlan", True
                raise ExpressionExcludesAllPackets(
                    "The section settings exclude every packet"
                )
            return "not vlan", True

        if not state.expression:
            if index == 0:
                if last_included == 0 or not self.vlan_supported:
                    return ("not vlan" if self.vlan_supported else ""), True
                return UNTAGGED_WITHOUT_OFFSET, False
            terminal = last_excluded < index and last_filtered < index
            return "vlan", terminal

        if index == 0:
            return state.expression, False
        return f"vlan and {state.grouped_expression()}", False


def compile_expression(attributes: Iterable[Attribute], vlan_supported: bool = True) -> str:
    """
    Compile attributes into a pcap-filter expression.

    Args:
        attributes: Ordered attribute collection
        vlan_supported: Whether the capture interface can carry VLAN tags

    Returns:
        The expression, or an empty string to capture everything
    """
    return ExpressionCompiler(vlan_supported=vlan_supported).compile(attributes)
