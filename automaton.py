from collections import defaultdict, deque
from dataclasses import dataclass, field
from types import MappingProxyType
from typing_extensions import *

from graphviz import Digraph


# -----------------------------------------------------------------------------
# Errors
# -----------------------------------------------------------------------------


class AutomatonError(ValueError):
    """Base class for everything this module raises."""


class ParseError(AutomatonError):
    """A description file could not be turned into an automaton."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


class MissingSection(ParseError):
    def __init__(self, section: str, line_number: Optional[int] = None):
        super().__init__(f"Couldn't find the {section} definition", line_number)
        self.section = section


class UnknownStateReference(ParseError):
    def __init__(self, state: str, role: str, line_number: Optional[int] = None):
        super().__init__(
            f"{role.capitalize()} '{state}' is not among the defined states",
            line_number,
        )
        self.state = state
        self.role = role


class UnknownSymbolInAlphabet(ParseError):
    def __init__(self, symbol: str, line_number: Optional[int] = None):
        super().__init__(
            f"Symbol '{symbol}' doesn't belong to the alphabet definition",
            line_number,
        )
        self.symbol = symbol


class MalformedTransitionLine(ParseError):
    def __init__(self, line: str, reason: str, line_number: Optional[int] = None):
        super().__init__(f"Malformed transition '{line}': {reason}", line_number)
        self.line = line
        self.reason = reason


class DuplicateState(ParseError):
    def __init__(self, state: str, line_number: Optional[int] = None):
        super().__init__(f"State '{state}' is defined more than once", line_number)
        self.state = state


class UnknownSymbolDuringResolution(AutomatonError):
    def __init__(self, symbol: str):
        super().__init__(f"Symbol {symbol} isn't in the alphabet")
        self.symbol = symbol


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


TRANSITION_ARROW = "=>"

Frontier = FrozenSet[str]
TransitionMap = Mapping[str, Mapping[str, FrozenSet[str]]]


def _split_list(line: str) -> List[str]:
    return [part.strip() for part in line.split(",")]


def _freeze_nested(mapping: Mapping) -> Mapping:
    """Read-only copy of a mapping of mappings."""
    return MappingProxyType(
        {key: MappingProxyType(dict(inner)) for key, inner in mapping.items()}
    )


def state_set_label(states: Iterable[str]) -> str:
    """Render a set of state names as ``{a,b}``, or ``∅`` when empty."""
    names = sorted(states)
    if not names:
        return "∅"
    return "{" + ",".join(names) + "}"


def _new_digraph(name: str) -> Digraph:
    return Digraph(
        name=name,
        format="png",
        graph_attr={
            "rankdir": "LR",
            "splines": "true",
            "nodesep": "0.8",
            "ranksep": "1.2",
            "label": name,
            "labelloc": "t",
            "fontsize": "14",
            "fontname": "Arial",
            "bgcolor": "white",
            "pad": "0.5",
        },
        node_attr={
            "shape": "circle",
            "fontsize": "14",
            "fontname": "Arial",
            "style": "filled",
            "fillcolor": "lightblue",
            "color": "black",
            "penwidth": "2",
        },
        edge_attr={
            "fontsize": "12",
            "fontname": "Arial",
            "arrowsize": "0.8",
            "penwidth": "1.5",
            "color": "black",
        },
    )


def _add_edges(dot: Digraph, edges: Iterable[Tuple[str, str, str]]) -> None:
    """Add (src_id, symbol, tgt_id) edges, merging parallel symbols into one label."""
    grouped = defaultdict(list)
    for src_id, symbol, tgt_id in edges:
        grouped[(src_id, tgt_id)].append(symbol)

    for (src_id, tgt_id), symbols in sorted(grouped.items()):
        label = ", ".join(sorted(symbols))
        if src_id == tgt_id:
            dot.edge(src_id, tgt_id, label=label, headport="n", tailport="n")
        else:
            dot.edge(src_id, tgt_id, label=label)


# -----------------------------------------------------------------------------
# NFA
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class State:
    name: str
    is_final: bool = False


@dataclass(frozen=True, eq=False)
class Automaton:
    """
    Nondeterministic finite automaton.

    ``transitions`` maps a state name to a mapping from symbol to the set of
    destination state names. A missing entry means "no destination".
    The automaton is read-only once built: the mappings are wrapped in
    ``MappingProxyType`` and instances hash by identity.
    """

    states: Mapping[str, State]
    alphabet: FrozenSet[str]
    initial_state: str
    transitions: TransitionMap = field(default_factory=dict)

    # -------------------------------------------------------------------------
    # Construction / loading
    # -------------------------------------------------------------------------

    @staticmethod
    def from_string(content: str) -> "Automaton":
        """Parse the five-section text format into an automaton."""
        return Automaton._parse_lines(content.splitlines())

    @staticmethod
    def _parse_lines(lines: List[str]) -> "Automaton":
        numbered = iter(enumerate(lines, start=1))

        def next_section(section: str) -> Tuple[int, str]:
            try:
                line_number, line = next(numbered)
            except StopIteration:
                raise MissingSection(section, len(lines) + 1) from None
            return line_number, line.strip()

        # Parse states
        line_number, line = next_section("states")
        if not line:
            raise MissingSection("states", line_number)
        finals: Set[str] = set()
        declared: List[str] = []
        for name in _split_list(line):
            if name in declared:
                raise DuplicateState(name, line_number)
            declared.append(name)

        # Parse alphabet
        line_number, line = next_section("alphabet")
        if not line:
            raise MissingSection("alphabet", line_number)
        alphabet = frozenset(_split_list(line))

        # Parse initial state
        line_number, initial_state = next_section("initial state")
        if not initial_state:
            raise MissingSection("initial state", line_number)
        if initial_state not in declared:
            raise UnknownStateReference(initial_state, "initial state", line_number)

        # Parse final states
        line_number, line = next_section("final states")
        if line:
            for name in _split_list(line):
                if name not in declared:
                    raise UnknownStateReference(name, "final state", line_number)
                finals.add(name)

        # Parse transitions
        accumulated = defaultdict(lambda: defaultdict(set))
        for line_number, line in numbered:
            line = line.strip()
            if not line:
                continue
            src, symbol, targets = Automaton._parse_transition(line, line_number)
            if src not in declared:
                raise UnknownStateReference(src, "starting state", line_number)
            if symbol not in alphabet:
                raise UnknownSymbolInAlphabet(symbol, line_number)
            for tgt in targets:
                if tgt not in declared:
                    raise UnknownStateReference(tgt, "ending state", line_number)
                accumulated[src][symbol].add(tgt)

        return Automaton(
            states={name: State(name, name in finals) for name in declared},
            alphabet=alphabet,
            initial_state=initial_state,
            transitions={
                src: {sym: frozenset(tgts) for sym, tgts in by_symbol.items()}
                for src, by_symbol in accumulated.items()
            },
        )

    @staticmethod
    def _parse_transition(line: str, line_number: int) -> Tuple[str, str, List[str]]:
        """Split ``from,symbol=>to1,to2`` into its three parts."""
        if TRANSITION_ARROW not in line:
            raise MalformedTransitionLine(
                line, f"missing '{TRANSITION_ARROW}'", line_number
            )
        left, right = line.split(TRANSITION_ARROW, 1)

        from_symbol = _split_list(left)
        if len(from_symbol) < 2:
            raise MalformedTransitionLine(
                line, "expected a starting state and a symbol", line_number
            )
        if len(from_symbol) > 2:
            raise MalformedTransitionLine(
                line, "too many elements before the arrow", line_number
            )
        src, symbol = from_symbol

        if not right.strip():
            raise MalformedTransitionLine(line, "no ending states", line_number)

        return src, symbol, _split_list(right)

    def __post_init__(self):
        """Validate that every reference points at a declared state or symbol."""
        if self.initial_state not in self.states:
            raise UnknownStateReference(self.initial_state, "initial state")

        for src, by_symbol in self.transitions.items():
            if src not in self.states:
                raise UnknownStateReference(src, "starting state")
            for symbol, targets in by_symbol.items():
                if symbol not in self.alphabet:
                    raise UnknownSymbolInAlphabet(symbol)
                for tgt in targets:
                    if tgt not in self.states:
                        raise UnknownStateReference(tgt, "ending state")

        object.__setattr__(self, "alphabet", frozenset(self.alphabet))
        object.__setattr__(self, "states", MappingProxyType(dict(self.states)))
        object.__setattr__(self, "transitions", _freeze_nested(self.transitions))

    # -------------------------------------------------------------------------
    # Simulation
    # -------------------------------------------------------------------------

    @property
    def final_states(self) -> FrozenSet[str]:
        return frozenset(name for name, state in self.states.items() if state.is_final)

    def _get_targets(self, state: str, symbol: str) -> FrozenSet[str]:
        return self.transitions.get(state, {}).get(symbol, frozenset())

    def resolve(self, symbols: Sequence[str]) -> Frontier:
        """
        Compute the set of states reachable after consuming ``symbols``.

        Raises UnknownSymbolDuringResolution on the first symbol that is not
        part of the alphabet. An empty result is a dead configuration, not an
        error.
        """
        current: Frontier = frozenset({self.initial_state})
        for symbol in symbols:
            if symbol not in self.alphabet:
                raise UnknownSymbolDuringResolution(symbol)
            current = frozenset(
                target for state in current for target in self._get_targets(state, symbol)
            )
        return current

    def is_accepting(self, frontier: Iterable[str]) -> bool:
        return any(self.states[name].is_final for name in frontier)

    def accepts(self, symbols: Sequence[str]) -> bool:
        return self.is_accepting(self.resolve(symbols))

    # -------------------------------------------------------------------------
    # Determinization
    # -------------------------------------------------------------------------

    def to_DFA(self) -> "DFA":
        """Convert to a DFA using the powerset construction over reachable subsets."""
        start = frozenset({self.initial_state})
        transitions: Dict[Frontier, Dict[str, Frontier]] = {}
        queue = deque([start])
        seen = {start}

        while queue:
            subset = queue.popleft()
            transitions[subset] = {}
            for symbol in sorted(self.alphabet):
                target = frozenset(
                    t for q in subset for t in self._get_targets(q, symbol)
                )
                transitions[subset][symbol] = target
                if target not in seen:
                    seen.add(target)
                    queue.append(target)

        finals = self.final_states
        return DFA(
            alphabet=self.alphabet,
            initial_state=start,
            transitions=transitions,
            accepting_states=frozenset(s for s in seen if s & finals),
        )

    # -------------------------------------------------------------------------
    # Visualization
    # -------------------------------------------------------------------------

    def to_graphviz(self) -> Digraph:
        """Build a Graphviz graph of this automaton."""
        dot = _new_digraph("NFA")
        state_to_id = {name: f"q{i}" for i, name in enumerate(sorted(self.states))}

        dot.node("__start__", shape="point", width="0.01", style="invis")
        for name in sorted(self.states):
            if self.states[name].is_final:
                dot.node(
                    state_to_id[name],
                    label=name,
                    shape="doublecircle",
                    fillcolor="lightgreen",
                )
            else:
                dot.node(state_to_id[name], label=name)
        dot.edge("__start__", state_to_id[self.initial_state], penwidth="2")

        _add_edges(
            dot,
            (
                (state_to_id[src], symbol, state_to_id[tgt])
                for src, by_symbol in self.transitions.items()
                for symbol, targets in by_symbol.items()
                for tgt in targets
            ),
        )
        return dot

    def render_graph(self, filename: str = "automaton", view: bool = False) -> str:
        return self.to_graphviz().render(filename, view=view, cleanup=True)

    def __str__(self):
        lines = ["Automata {"]
        lines.append(f"    Language: {state_set_label(self.alphabet)},")
        lines.append("    States: [")
        for name in sorted(self.states):
            by_symbol = self.transitions.get(name, {})
            moves = ", ".join(
                f"{symbol} => {state_set_label(by_symbol[symbol])}"
                for symbol in sorted(by_symbol)
            )
            lines.append(
                f"        {name}: final={self.states[name].is_final}, transitions=[{moves}]"
            )
        lines.append("    ],")
        lines.append(f"    Initial State: {self.initial_state},")
        lines.append("}")
        return "\n".join(lines)


# -----------------------------------------------------------------------------
# DFA
# -----------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class DFA:
    """
    Deterministic automaton produced by ``Automaton.to_DFA``.

    Every state is a frozenset of NFA state names and every state has a
    transition on every symbol; the empty set is the dead state.
    """

    alphabet: FrozenSet[str]
    initial_state: Frontier
    transitions: Mapping[Frontier, Mapping[str, Frontier]]
    accepting_states: FrozenSet[Frontier] = field(default_factory=frozenset)

    def __post_init__(self):
        object.__setattr__(self, "transitions", _freeze_nested(self.transitions))

    @property
    def states(self) -> FrozenSet[Frontier]:
        return frozenset(self.transitions)

    def resolve(self, symbols: Sequence[str]) -> Frontier:
        current = self.initial_state
        for symbol in symbols:
            if symbol not in self.alphabet:
                raise UnknownSymbolDuringResolution(symbol)
            current = self.transitions[current][symbol]
        return current

    def is_accepting(self, state: Frontier) -> bool:
        return state in self.accepting_states

    def accepts(self, symbols: Sequence[str]) -> bool:
        return self.is_accepting(self.resolve(symbols))

    def to_graphviz(self) -> Digraph:
        dot = _new_digraph("DFA")
        state_to_id: Dict[Frontier, str] = {}
        for subset in sorted(self.transitions, key=state_set_label):
            state_to_id[subset] = f"q{len(state_to_id)}"

        dot.node("__start__", shape="point", width="0.01", style="invis")
        for subset, node_id in state_to_id.items():
            if subset in self.accepting_states:
                dot.node(
                    node_id,
                    label=state_set_label(subset),
                    shape="doublecircle",
                    fillcolor="lightgreen",
                )
            else:
                dot.node(node_id, label=state_set_label(subset))
        dot.edge("__start__", state_to_id[self.initial_state], penwidth="2")

        _add_edges(
            dot,
            (
                (state_to_id[src], symbol, state_to_id[tgt])
                for src, by_symbol in self.transitions.items()
                for symbol, tgt in by_symbol.items()
            ),
        )
        return dot

    def render_graph(self, filename: str = "automaton", view: bool = False) -> str:
        return self.to_graphviz().render(filename, view=view, cleanup=True)

    def __str__(self):
        lines = ["Automata {"]
        lines.append(f"    Language: {state_set_label(self.alphabet)},")
        lines.append("    States: [")
        for subset in sorted(self.transitions, key=state_set_label):
            moves = ", ".join(
                f"{symbol} => {state_set_label(tgt)}"
                for symbol, tgt in sorted(self.transitions[subset].items())
            )
            lines.append(
                f"        {state_set_label(subset)}: "
                f"final={subset in self.accepting_states}, transitions=[{moves}]"
            )
        lines.append("    ],")
        lines.append(f"    Initial State: {state_set_label(self.initial_state)},")
        lines.append("}")
        return "\n".join(lines)
