"""Tests for formfields.form — the per-request FormFields helper."""

import pytest

import formfields
from formfields import FormFields, FormFieldsConfig
from formfields.context import BindingContext
from formfields.params import Params


class TestFormFields:
    def test_defaults(self) -> None:
        form = FormFields()
        assert form.config == FormFieldsConfig()
        assert isinstance(form.context, BindingContext)
        assert len(form.context.params) == 0
        assert form.valid()
        assert form.errors() == {}

    def test_accepts_params_instance(self) -> None:
        params = Params({"user.name": ["B"]})
        form = FormFields(stash={"user": {}}, params=params)
        assert form.context.params is params
        assert form.field("user.name").value == "B"

    def test_stash_is_read_only(self) -> None:
        form = FormFields(stash={"user": {}})
        with pytest.raises(TypeError):
            form.context.stash["user"] = {}  # type: ignore[index]

    def test_errors_first_message_per_field(self) -> None:
        form = FormFields(stash={"user": {"name": "", "email": "x"}})
        form.field("user.name").required().min_length(3)
        form.field("user.email").email()
        assert form.errors() == {
            "user.name": "This field is required",
            "user.email": "Must be a valid email address",
        }
        assert form.errors("user.email") == "Must be a valid email address"
        assert form.errors("user.missing") is None

    def test_valid_per_field(self) -> None:
        form = FormFields(stash={"user": {"name": "sshaw", "email": ""}})
        form.field("user.name").required()
        form.field("user.email").required()
        assert form.valid("user.name")
        assert not form.valid("user.email")
        assert not form.valid()

    def test_validation_runs_once(self) -> None:
        seen: list[str] = []
        form = FormFields(stash={"user": {"name": "sshaw"}})
        form.field("user.name").check(lambda v: seen.append(v) or True)
        assert form.valid()
        assert form.valid()
        assert form.errors() == {}
        assert seen == ["sshaw"]

    def test_values_are_filtered(self) -> None:
        form = FormFields(stash={"user": {}}, params={"user.email": "  Me@Example.COM "})
        form.field("user.email").filter("trim", "lower").email()
        assert form.valid()
        assert form.values == {"user.email": "me@example.com"}

    def test_submitted_override_in_validation(self) -> None:
        form = FormFields(stash={"user": {"name": "A"}}, params={"user.name": ""})
        form.field("user.name").required()
        assert not form.valid()

    def test_optional_blank_fields_stay_valid(self) -> None:
        form = FormFields(stash={"user": {"email": "", "age": "", "nick": ""}})
        form.field("user.email").email()
        form.field("user.age").integer()
        form.field("user.nick").min_length(3)
        assert form.valid()
        assert form.errors() == {}

    def test_check_on_checkbox_group(self) -> None:
        form = FormFields(stash={"user": {}}, params={"user.roles": ["a", "b"]})
        form.field("user.roles").check(lambda roles: set(roles) <= {"a", "b", "c"}, "Unknown role")
        assert form.valid()

    def test_check_on_checkbox_group_fails(self) -> None:
        form = FormFields(stash={"user": {}}, params={"user.roles": ["a", "z"]})
        form.field("user.roles").check(lambda roles: set(roles) <= {"a", "b"}, "Unknown role")
        assert form.errors("user.roles") == "Unknown role"

    def test_repr(self) -> None:
        form = FormFields(stash={"user": {}})
        form.field("user.name").required()
        assert repr(form) == "<FormFields stash=['user'] rules=1>"


class TestTopLevelImports:
    def test_lazy_exports(self) -> None:
        for name in formfields.__all__:
            assert getattr(formfields, name) is not None

    def test_unknown_attribute(self) -> None:
        with pytest.raises(AttributeError, match="no attribute 'nope'"):
            formfields.nope  # noqa: B018
