import pytest

from ed_engine.buffer import LineStore
from ed_engine.errors import CommandSyntaxError, PatternError, StateError
from ed_engine.pattern import PatternEngine, SubstitutionSpec, parse_template
from ed_engine.scanner import CommandScanner


def make_spec(engine: PatternEngine, pattern: str, template: str, **kwargs) -> SubstitutionSpec:
    return SubstitutionSpec(engine.compile(pattern), parse_template(template), **kwargs)


def make_store(*lines: str) -> LineStore:
    store = LineStore()
    store.load(lines)
    return store


def test_substitute_first_match_by_default() -> None:
    engine = PatternEngine()

    assert engine.substitute("aaa", make_spec(engine, "a", "b")) == ("baa", 1)


def test_substitute_count_replaces_first_n() -> None:
    engine = PatternEngine()

    assert engine.substitute("aaa", make_spec(engine, "a", "b", count=2)) == ("bba", 2)


def test_substitute_global_replaces_all() -> None:
    engine = PatternEngine()
    spec = make_spec(engine, "a", "b", replace_all=True)

    assert engine.substitute("aaa", spec) == ("bbb", 3)


def test_substitute_reports_no_match() -> None:
    engine = PatternEngine()

    assert engine.substitute("xyz", make_spec(engine, "a", "b")) == ("xyz", 0)


def test_template_groups_and_whole_match() -> None:
    engine = PatternEngine()
    spec = make_spec(engine, "(b)(c)", "<&>\\2\\1")

    assert engine.substitute("abcd", spec) == ("a<bc>cbd", 1)


def test_template_escapes_are_literal() -> None:
    template = parse_template("\\&\\\\x")

    assert template.parts == ("&\\x",)
    assert template.max_group == 0


def test_back_reference_beyond_groups_fails() -> None:
    engine = PatternEngine()
    spec = make_spec(engine, "(a)", "\\2")

    with pytest.raises(PatternError, match="invalid back reference"):
        engine.substitute("a", spec)


def test_empty_pattern_reuses_last_one() -> None:
    engine = PatternEngine()

    with pytest.raises(PatternError, match="no previous pattern"):
        engine.compile("")

    first = engine.compile("ab+")
    assert engine.compile("") is first


def test_bad_pattern_is_a_pattern_error() -> None:
    engine = PatternEngine()

    with pytest.raises(PatternError):
        engine.compile("(")


def test_read_pattern_leaves_closing_delimiter() -> None:
    engine = PatternEngine()
    scanner = CommandScanner("/a\\/b/p\n")

    pattern = engine.read_pattern(scanner)

    assert pattern.pattern == "a\\/b"
    assert scanner.rest() == "/p\n"


def test_escaped_alphanumeric_delimiter_drops_backslash() -> None:
    engine = PatternEngine()
    scanner = CommandScanner("xa\\xbx\n")

    assert engine.read_pattern(scanner).pattern == "axb"


def test_read_pattern_rejects_blank_delimiter() -> None:
    engine = PatternEngine()

    with pytest.raises(CommandSyntaxError, match="invalid pattern delimiter"):
        engine.read_pattern(CommandScanner(" a \n"))


def test_parse_substitution_count_and_flags() -> None:
    engine = PatternEngine()

    spec = engine.parse_substitution(CommandScanner("/a/b/3p\n"))

    assert spec.count == 3
    assert not spec.replace_all
    assert spec.print_flags == "p"
    assert engine.last_substitution is spec


def test_parse_substitution_later_flag_wins() -> None:
    engine = PatternEngine()

    assert engine.parse_substitution(CommandScanner("/a/b/2g\n")).replace_all
    spec = engine.parse_substitution(CommandScanner("/a/b/g2\n"))
    assert spec.count == 2
    assert not spec.replace_all


def test_parse_substitution_zero_count_is_invalid() -> None:
    engine = PatternEngine()

    with pytest.raises(CommandSyntaxError, match="invalid command suffix"):
        engine.parse_substitution(CommandScanner("/a/b/0\n"))


def test_parse_substitution_unterminated_forms_print() -> None:
    engine = PatternEngine()

    spec = engine.parse_substitution(CommandScanner("/a\n"))
    assert spec.template.parts == ()
    assert spec.print_flags == "p"

    spec = engine.parse_substitution(CommandScanner("/a/b\n"))
    assert spec.template.source == "b"
    assert spec.print_flags == "p"


def test_percent_template_reuses_previous() -> None:
    engine = PatternEngine()
    engine.parse_substitution(CommandScanner("/a/xyz/\n"))

    spec = engine.parse_substitution(CommandScanner("/b/%/\n"))

    assert spec.template.source == "xyz"


def test_percent_template_without_history_fails() -> None:
    engine = PatternEngine()

    with pytest.raises(StateError, match="no previous substitution"):
        engine.parse_substitution(CommandScanner("/a/%/\n"))


def test_repeat_form_toggles_flags() -> None:
    engine = PatternEngine()
    engine.parse_substitution(CommandScanner("/a/b/\n"))

    repeat = engine.parse_substitution(CommandScanner("gp\n"))

    assert repeat.replace_all
    assert repeat.print_flags == "p"
    assert repeat.pattern.pattern == "a"


def test_repeat_form_r_uses_last_search() -> None:
    engine = PatternEngine()
    engine.parse_substitution(CommandScanner("/a/b/\n"))
    engine.compile("c")

    repeat = engine.parse_substitution(CommandScanner("r\n"))

    assert repeat.pattern.pattern == "c"


def test_repeat_form_without_history_fails() -> None:
    engine = PatternEngine()

    with pytest.raises(StateError, match="no previous substitution"):
        engine.parse_substitution(CommandScanner("\n"))


def test_search_and_replace_moves_to_last_changed_line() -> None:
    engine = PatternEngine()
    store = make_store("ab", "cd", "ab", "ef")

    changed = engine.search_and_replace(store, 1, 4, make_spec(engine, "a", "x"))

    assert changed == 2
    assert store.contents() == ["xb", "cd", "xb", "ef"]
    assert store.current_addr == 3


def test_search_and_replace_splits_on_newline() -> None:
    engine = PatternEngine()
    store = make_store("a,b", "c")

    engine.search_and_replace(store, 1, 2, make_spec(engine, ",", "\\\n"))

    assert store.contents() == ["a", "b", "c"]
    assert store.current_addr == 2


def test_search_and_replace_without_match_keeps_cursor() -> None:
    engine = PatternEngine()
    store = make_store("a", "b")
    store.current_addr = 1

    with pytest.raises(PatternError, match="no match"):
        engine.search_and_replace(store, 1, 2, make_spec(engine, "z", "y"))
    assert store.current_addr == 1

    assert engine.search_and_replace(
        store, 1, 2, make_spec(engine, "z", "y"), in_global=True
    ) == 0


def test_find_line_wraps_around() -> None:
    engine = PatternEngine()
    store = make_store("x1", "y", "x2")
    store.current_addr = 3

    assert engine.find_line(store, engine.compile("x"), forward=True) == 1
    assert engine.find_line(store, engine.compile("x"), forward=False) == 1
    with pytest.raises(PatternError, match="no match"):
        engine.find_line(store, engine.compile("q"), forward=True)
