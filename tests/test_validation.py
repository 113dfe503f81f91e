"""Tests for formfields.validation — rules, validate(), and RuleSet."""

import pytest

from formfields.errors import ConfigurationError
from formfields.paths import UNRESOLVED
from formfields.validation import (
    FILTERS,
    RuleSet,
    ValidationResult,
    check,
    email,
    equals,
    integer,
    matches,
    max_length,
    min_length,
    number,
    one_of,
    required,
    url,
    validate,
    with_message,
)

# ---------------------------------------------------------------------------
# Individual rule tests
# ---------------------------------------------------------------------------


class TestRequired:
    def test_empty_string(self) -> None:
        assert required("") is not None

    def test_whitespace_only(self) -> None:
        assert required("   ") is not None

    def test_valid(self) -> None:
        assert required("hello") is None


class TestLength:
    def test_max_within_limit(self) -> None:
        assert max_length(5)("hello") is None

    def test_max_exceeds_limit(self) -> None:
        assert max_length(5)("123456") == "Must be at most 5 characters"

    def test_min_at_minimum(self) -> None:
        assert min_length(3)("abc") is None

    def test_min_below_minimum(self) -> None:
        assert min_length(3)("ab") == "Must be at least 3 characters"


class TestFormat:
    def test_email(self) -> None:
        assert email("first.last@sub.domain.org") is None
        assert email("user@") is not None

    def test_url(self) -> None:
        assert url("https://example.com") is None
        assert url("ftp://example.com") is not None

    def test_matches(self) -> None:
        assert matches(r"^\d{3}$")("123") is None
        assert matches(r"^\d{3}$")("12") == r"Must match pattern: ^\d{3}$"

    def test_matches_custom_message(self) -> None:
        assert matches(r"^\d+$", message="Numbers only")("abc") == "Numbers only"


class TestComparison:
    def test_equals(self) -> None:
        assert equals("secret", "user.password")("secret") is None
        assert equals("secret", "user.password")("other") == "Must match user.password"

    def test_one_of(self) -> None:
        assert one_of("red", "green")("red") is None
        assert one_of("red", "green")("blue") == "Must be one of: green, red"

    def test_one_of_non_strings(self) -> None:
        assert one_of(1, 2)("2") is None


class TestTypes:
    def test_integer(self) -> None:
        assert integer("-7") is None
        assert integer("3.14") is not None

    def test_number(self) -> None:
        assert number("3.14") is None
        assert number("abc") is not None


class TestBlankValues:
    @pytest.mark.parametrize(
        "rule",
        [min_length(3), email, url, matches(r"^\d+$"), one_of("a", "b"), integer, number],
    )
    def test_optional_rules_accept_blank(self, rule) -> None:
        assert rule("") is None

    def test_max_length_accepts_blank(self) -> None:
        assert max_length(3)("") is None

    def test_equals_rejects_blank(self) -> None:
        assert equals("secret", "user.password")("") == "Must match user.password"


class TestCustom:
    def test_check(self) -> None:
        even = check(lambda v: int(v) % 2 == 0, "Must be even")
        assert even("4") is None
        assert even("3") == "Must be even"

    def test_with_message(self) -> None:
        rule = with_message(min_length(3), "Too short")
        assert rule("ab") == "Too short"
        assert rule("abc") is None


class TestFilters:
    def test_builtin_filters(self) -> None:
        assert FILTERS["trim"]("  a b  ") == "a b"
        assert FILTERS["strip"]("  a   b  ") == "a b"
        assert FILTERS["lower"]("AbC") == "abc"
        assert FILTERS["upper"]("AbC") == "ABC"


# ---------------------------------------------------------------------------
# validate()
# ---------------------------------------------------------------------------


class TestValidate:
    def test_all_valid(self) -> None:
        result = validate({"name": "alice", "age": "30"}, {"name": [required], "age": [integer]})
        assert result.is_valid
        assert result.data == {"name": "alice", "age": "30"}
        assert result.errors == {}

    def test_errors_in_rule_order(self) -> None:
        result = validate({"code": "ab"}, {"code": [min_length(3), matches(r"^\d+$", "Digits")]})
        assert result.errors == {"code": ["Must be at least 3 characters", "Digits"]}

    def test_required_stops_field(self) -> None:
        result = validate({}, {"name": [required, min_length(3)]})
        assert result.errors == {"name": ["This field is required"]}

    def test_required_with_message_stops_field(self) -> None:
        result = validate({}, {"name": [with_message(required, "Name please"), min_length(3)]})
        assert result.errors == {"name": ["Name please"]}

    def test_falsy_result(self) -> None:
        result = validate({}, {"name": [required]})
        assert not result
        assert result.first_error("name") == "This field is required"
        assert result.first_error("other") is None


class TestValidationResult:
    def test_truthy_when_valid(self) -> None:
        assert ValidationResult(data={"a": "1"}, errors={})


# ---------------------------------------------------------------------------
# RuleSet
# ---------------------------------------------------------------------------


class _Values:
    """Lookup that counts how often each field is read."""

    def __init__(self, values: dict[str, object]) -> None:
        self.values = values
        self.reads = 0

    def __call__(self, name: str, root: object = UNRESOLVED) -> object:
        self.reads += 1
        if root is not UNRESOLVED:
            return root.get(name, UNRESOLVED)  # type: ignore[attr-defined]
        return self.values.get(name, UNRESOLVED)


class TestRuleSet:
    def test_valid_without_rules(self) -> None:
        rules = RuleSet(_Values({}))
        assert rules.is_valid()
        assert rules.error_for("anything") is None

    def test_required_and_equals_both_registered(self) -> None:
        rules = RuleSet(_Values({"user.password": "secret", "user.confirm": ""}))
        rules.add_rule("user.confirm", "required")
        rules.add_rule("user.confirm", "equals", "user.password")
        assert [r.kind for r in rules] == ["required", "equals"]
        assert not rules.is_valid("user.confirm")
        assert rules.error_for("user.confirm") == "This field is required"

    def test_first_failing_rule_in_declaration_order(self) -> None:
        rules = RuleSet(_Values({"user.password": "secret", "user.confirm": "nope"}))
        rules.add_rule("user.confirm", "equals", "user.password")
        rules.add_rule("user.confirm", "min_length", 8)
        assert rules.errors_for("user.confirm") == ["Must match user.password", "Must be at least 8 characters"]
        assert rules.error_for("user.confirm") == "Must match user.password"

    def test_equals_passes(self) -> None:
        rules = RuleSet(_Values({"a": "x", "b": "x"}))
        rules.add_rule("b", "equals", "a")
        assert rules.is_valid("b")
        assert rules.is_valid()

    def test_whole_form_is_and_of_fields(self) -> None:
        rules = RuleSet(_Values({"a": "x", "b": ""}))
        rules.add_rule("a", "required")
        rules.add_rule("b", "required")
        assert rules.is_valid("a")
        assert not rules.is_valid("b")
        assert not rules.is_valid()

    def test_validation_is_cached(self) -> None:
        lookup = _Values({"a": "x"})
        calls: list[str] = []
        rules = RuleSet(lookup)
        rules.add_rule("a", "check", lambda v: calls.append(v) or True)
        first = rules.is_valid()
        second = rules.is_valid()
        assert first == second
        assert calls == ["x"]
        assert lookup.reads == 1

    def test_new_rule_clears_cache(self) -> None:
        rules = RuleSet(_Values({"a": ""}))
        assert rules.is_valid()
        assert rules.validated
        rules.add_rule("a", "required")
        assert not rules.validated
        assert not rules.is_valid()

    def test_filters_run_before_rules(self) -> None:
        rules = RuleSet(_Values({"a": "  ABC  "}))
        rules.add_filter("a", "trim", "lower")
        rules.add_rule("a", "max_length", 3)
        result = rules.validate()
        assert result.is_valid
        assert result.data == {"a": "abc"}

    def test_callable_filter(self) -> None:
        rules = RuleSet(_Values({"a": "x"}))
        rules.add_filter("a", lambda v: v * 3)
        assert rules.validate().data == {"a": "xxx"}

    def test_equals_compares_filtered_values(self) -> None:
        rules = RuleSet(_Values({"a": " Secret ", "b": "secret"}))
        rules.add_filter("a", "trim", "lower")
        rules.add_rule("b", "equals", "a")
        assert rules.is_valid("b")

    def test_custom_message(self) -> None:
        rules = RuleSet(_Values({"a": ""}))
        rules.add_rule("a", "required", message="Tell us your name")
        assert rules.error_for("a") == "Tell us your name"

    def test_check_message(self) -> None:
        rules = RuleSet(_Values({"a": "3"}))
        rules.add_rule("a", "check", lambda v: v == "4", message="Must be four")
        assert rules.error_for("a") == "Must be four"

    def test_unresolved_and_bool_values(self) -> None:
        rules = RuleSet(_Values({"b": True}))
        rules.add_rule("a", "required")
        rules.add_rule("b", "one_of", "1")
        assert rules.errors_for("a") == ["This field is required"]
        assert rules.is_valid("b")

    def test_unknown_rule(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown rule 'bogus'"):
            RuleSet(_Values({})).add_rule("a", "bogus")

    def test_unknown_filter(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown filter 'bogus'"):
            RuleSet(_Values({})).add_filter("a", "bogus")

    def test_optional_blank_field_is_valid(self) -> None:
        rules = RuleSet(_Values({"a": "", "b": UNRESOLVED, "c": "  "}))
        rules.add_rule("a", "email")
        rules.add_rule("b", "integer")
        rules.add_filter("c", "trim")
        rules.add_rule("c", "min_length", 3)
        assert rules.is_valid()

    def test_blank_required_field_reports_required_only(self) -> None:
        rules = RuleSet(_Values({"a": ""}))
        rules.add_rule("a", "required")
        rules.add_rule("a", "email")
        assert rules.errors_for("a") == ["This field is required"]

    def test_check_sees_every_submitted_value(self) -> None:
        seen: list[object] = []
        rules = RuleSet(_Values({"user.roles": ["a", "b"]}))
        rules.add_rule("user.roles", "check", lambda v: seen.append(v) or len(v) == 2)
        assert rules.is_valid()
        assert seen == [["a", "b"]]

    def test_check_list_is_filtered(self) -> None:
        rules = RuleSet(_Values({"tags": [" A ", "b"]}))
        rules.add_filter("tags", "trim", "lower")
        rules.add_rule("tags", "check", lambda v: v == ["a", "b"], message="Bad tags")
        assert rules.is_valid("tags")

    def test_required_group_uses_first_non_blank_value(self) -> None:
        rules = RuleSet(_Values({"roles": ["", "dev"], "none": ["", " "]}))
        rules.add_rule("roles", "required")
        rules.add_rule("none", "required")
        assert rules.is_valid("roles")
        assert not rules.is_valid("none")

    def test_rule_root_is_per_field(self) -> None:
        rules = RuleSet(_Values({"user.name": "stash", "user.email": "me@example.com"}))
        rules.add_rule("user.name", "check", lambda v: v == "rooted", root={"user.name": "rooted"})
        rules.add_rule("user.email", "required")
        assert rules.is_valid()
        assert rules.validate().data == {"user.name": "rooted", "user.email": "me@example.com"}

    def test_equals_other_reads_declaring_root(self) -> None:
        root = {"user.password": "secret", "user.confirm": "secret"}
        rules = RuleSet(_Values({"user.password": "stash"}))
        rules.add_rule("user.confirm", "equals", "user.password", root=root)
        assert rules.is_valid("user.confirm")

    def test_fields_in_declaration_order(self) -> None:
        rules = RuleSet(_Values({}))
        rules.add_rule("b", "required")
        rules.add_rule("a", "required")
        rules.add_filter("c", "trim")
        assert rules.fields == ("b", "a", "c")
