from automaton import Automaton


def load_from_file(filename: str) -> Automaton:
    with open(filename, "r", encoding="utf-8") as f:
        content = f.read()

    return Automaton.from_string(content)
