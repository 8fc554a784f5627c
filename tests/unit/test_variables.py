"""
Unit tests for variable resolution, overrides and block separation.
"""

import pytest

from makeshift.contexts.parsing.blocks import apply_overrides, parse_overrides, separate_blocks
from makeshift.contexts.parsing.variables import (
    ExpansionMode,
    parse_definition,
    resolve_variables,
    substitute_variables,
)
from makeshift.exceptions import (
    MakeError,
    MakefileParseError,
    OverrideSyntaxError,
    ReservedVariableError,
    ShellSubstitutionError,
)


class TestParseDefinition:
    """Tests for parse_definition function."""

    @pytest.mark.unit
    def test_immediate_scanned_before_recursive(self):
        assert parse_definition("A := b = c") == ("A", ExpansionMode.IMMEDIATE, "b = c")

    @pytest.mark.unit
    def test_recursive(self):
        assert parse_definition("A = b := c") == ("A", ExpansionMode.RECURSIVE, "b := c")

    @pytest.mark.unit
    def test_continued_value_is_joined_with_spaces(self):
        assert parse_definition("SRCS := a.c\n  b.c") == ("SRCS", ExpansionMode.IMMEDIATE, "a.c b.c")

    @pytest.mark.unit
    def test_not_a_definition(self):
        with pytest.raises(MakefileParseError):
            parse_definition("all: out.txt")


class TestResolveVariables:
    """Tests for resolve_variables function."""

    @pytest.mark.unit
    def test_immediate_value_does_not_follow_later_redefinition(self):
        table = resolve_variables(["A := 1", "B := ${A}", "A := 2"], "/proj")

        assert table["B"].value == "1"
        assert table["A"].value == "2"

    @pytest.mark.unit
    def test_recursive_is_expanded_once_at_definition(self):
        table = resolve_variables(["A = x", "B = ${A} y", "A = z"], "/proj")

        assert table["B"].value == "x y"
        assert table["B"].mode is ExpansionMode.RECURSIVE

    @pytest.mark.unit
    def test_undefined_reference_is_kept(self):
        table = resolve_variables(["B := ${NOPE}/bin"], "/proj")

        assert table["B"].value == "${NOPE}/bin"

    @pytest.mark.unit
    def test_makefile_dir_forms(self):
        table = resolve_variables(["A := ${MAKEFILE_DIR}/a", "B = $MAKEFILE_DIR/b"], "/proj")

        assert table["A"].value == "/proj/a"
        assert table["B"].value == "/proj/b"

    @pytest.mark.unit
    def test_shell_substitution_in_immediate_definition(self, runner_factory):
        runner = runner_factory(outputs={"echo hi": "hi\n", "ls": "a.c\nb.c\n"})

        table = resolve_variables(["GREETING := $(echo hi)", "SRCS := $(ls)"], "/proj", runner=runner)

        assert table["GREETING"].value == "hi"
        assert table["SRCS"].value == "a.c b.c"
        assert runner.captured == ["echo hi", "ls"]

    @pytest.mark.unit
    def test_recursive_definition_keeps_shell_text(self, runner_factory):
        runner = runner_factory(outputs={"echo hi": "hi\n"})

        table = resolve_variables(["GREETING = $(echo hi)"], "/proj", runner=runner)

        assert table["GREETING"].value == "$(echo hi)"
        assert runner.captured == []

    @pytest.mark.unit
    def test_shell_substitution_sees_earlier_variables(self, runner_factory):
        runner = runner_factory(outputs={"echo v1": "v1\n"})

        table = resolve_variables(["V := v1", "OUT := $(echo ${V})"], "/proj", runner=runner)

        assert table["OUT"].value == "v1"

    @pytest.mark.unit
    def test_failed_shell_substitution_raises(self, runner_factory):
        runner = runner_factory()

        with pytest.raises(ShellSubstitutionError) as exc_info:
            resolve_variables(["X := $(missing-command)"], "/proj", runner=runner)

        assert exc_info.value.variable == "X"
        assert exc_info.value.command == "missing-command"

    @pytest.mark.unit
    @pytest.mark.parametrize("line", ["MAKEFILE_DIR := /elsewhere", "PARAM1 = value"])
    def test_reserved_names_cannot_be_defined(self, line):
        with pytest.raises(ReservedVariableError):
            resolve_variables([line], "/proj")

    @pytest.mark.unit
    def test_override_wins_over_definition(self):
        table = resolve_variables(["CC := gcc"], "/proj", overrides={"CC": "clang"})

        assert table["CC"].value == "clang"
        assert table["CC"].mode is ExpansionMode.OVERRIDE

    @pytest.mark.unit
    def test_substitute_variables_into_command_block(self):
        table = resolve_variables(["SRC := main.c", "OUT = app"], "/proj")

        lines = substitute_variables(["${OUT}: ${SRC}", "\tcc ${SRC} -o ${OUT} ${HOME}"], table)

        assert lines == ["app: main.c", "\tcc main.c -o app ${HOME}"]

    @pytest.mark.unit
    def test_substitute_variables_resolves_makefile_dir_in_rules(self):
        table = resolve_variables(["NAME := out"], "/proj")

        lines = substitute_variables(
            ["${MAKEFILE_DIR}/${NAME}.txt: $(MAKEFILE_DIR)/in.txt", "\tcp $< $@"], table, "/proj"
        )

        assert lines == ["/proj/out.txt: /proj/in.txt", "\tcp $< $@"]


class TestOverrides:
    """Tests for parse_overrides and apply_overrides."""

    @pytest.mark.unit
    def test_parse_overrides(self):
        parsed = parse_overrides(["CC=clang", "FLAGS=-O2 -g", "EMPTY=", "EXPR=a=b"])

        assert parsed == {"CC": "clang", "FLAGS": "-O2 -g", "EMPTY": "", "EXPR": "a=b"}

    @pytest.mark.unit
    @pytest.mark.parametrize("override", ["CC", "=clang", " =x"])
    def test_malformed_override_raises(self, override):
        with pytest.raises(OverrideSyntaxError):
            parse_overrides([override])

    @pytest.mark.unit
    def test_reserved_override_raises(self):
        with pytest.raises(ReservedVariableError):
            parse_overrides(["MAKEFILE_DIR=/tmp"])

    @pytest.mark.unit
    def test_apply_overrides_replaces_references(self):
        lines = apply_overrides(["CC := gcc", "\t${CC} -c ${SRC}"], {"CC": "clang"})

        assert lines == ["CC := gcc", "\tclang -c ${SRC}"]

    @pytest.mark.unit
    def test_positional_params(self):
        lines = apply_overrides(["\techo ${PARAM1} ${PARAM2}"], {}, ["first"])

        assert lines == ["\techo first ${PARAM2}"]

    @pytest.mark.unit
    def test_too_many_params(self):
        with pytest.raises(MakeError):
            apply_overrides(["x:"], {}, [str(i) for i in range(10)])


class TestSeparateBlocks:
    """Tests for separate_blocks function."""

    @pytest.mark.unit
    def test_split_at_first_target(self):
        lines = ["CC := gcc", "", "FLAGS = -O2", "", "all: app", "\techo", "", "app:"]

        blocks = separate_blocks(lines)

        assert blocks.variable_lines == ["CC := gcc", "FLAGS = -O2"]
        assert blocks.command_lines == ["all: app", "\techo", "", "app:"]

    @pytest.mark.unit
    def test_leading_phony_moves_to_command_block(self):
        blocks = separate_blocks([".PHONY: all", "CC := gcc", "all:"])

        assert blocks.variable_lines == ["CC := gcc"]
        assert blocks.command_lines == [".PHONY: all", "", "all:"]

    @pytest.mark.unit
    def test_phony_target_line_starts_command_block(self):
        blocks = separate_blocks(["@clean:", "\trm -f out"])

        assert blocks.command_lines == ["@clean:", "\trm -f out"]

    @pytest.mark.unit
    @pytest.mark.parametrize("line", ["\techo early", "not a definition"])
    def test_unexpected_line_before_first_target(self, line):
        with pytest.raises(MakefileParseError):
            separate_blocks([line, "all:"])
