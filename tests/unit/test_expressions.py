"""Unit tests for expression capture, evaluation and null-safe walking."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import pytest

from type_sync.core.exceptions import ExpressionCaptureError
from type_sync.expressions.capture import capture
from type_sync.expressions.nodes import (
    Binary,
    Call,
    Conditional,
    Constant,
    Lambda,
    Member,
    Parameter,
)
from type_sync.expressions.nullsafe import call_or_evaluate, decompose, evaluate, guard_chain
from type_sync.expressions.operators import invoke
from type_sync.expressions.visitor import ParameterReplacer


@dataclass
class Item:
    name: str = ""
    price: float = 0.0
    qty: int = 0


@dataclass
class Owner:
    name: str | None = None


@dataclass
class Basket:
    owner: Owner | None = None
    items: list[Item] = field(default_factory=list)
    discount: int = 0
    code: str = ""


class TestCapture:
    def test_member_chain(self) -> None:
        expression = capture(lambda b: b.owner.name, Basket)
        assert isinstance(expression, Lambda)
        body = expression.body
        assert isinstance(body, Member) and body.name == "name"
        assert isinstance(body.target, Member) and body.target.name == "owner"
        assert body.target.target is expression.parameter

    def test_member_types_follow_declarations(self) -> None:
        expression = capture(lambda b: b.owner.name, Basket)
        assert expression.body.type == str | None
        assert expression.parameter.type is Basket

    def test_undeclared_members_are_any(self) -> None:
        expression = capture(lambda x: x.anything.at_all)
        assert expression.body.type is Any

    def test_method_call_with_nested_lambda(self) -> None:
        expression = capture(lambda b: b.items.sum(lambda i: i.price * i.qty), Basket)
        body = expression.body
        assert isinstance(body, Call) and body.method == "sum"
        selector = body.args[0]
        assert isinstance(selector, Lambda)
        assert selector.parameter.type is Item
        assert isinstance(selector.body, Binary) and selector.body.op == "*"
        assert body.type is float

    def test_sequence_operator_types(self) -> None:
        assert capture(lambda b: b.items.count(), Basket).body.type is int
        assert capture(lambda b: b.items.first(), Basket).body.type is Item
        assert capture(lambda b: b.items.select(lambda i: i.name), Basket).body.type == list[str]

    def test_arithmetic_and_reflected_operators(self) -> None:
        expression = capture(lambda b: 100 - b.discount, Basket)
        body = expression.body
        assert isinstance(body, Binary) and body.op == "-"
        assert isinstance(body.left, Constant) and body.left.value == 100

    def test_comparison_is_bool(self) -> None:
        assert capture(lambda b: b.discount > 5, Basket).body.type is bool

    def test_boolean_logic_with_operators(self) -> None:
        expression = capture(lambda b: (b.discount > 5) & ~(b.code == ""), Basket)
        assert str(expression) == "lambda b: ((b.discount > 5) and not (b.code == ''))"

    def test_branching_aborts(self) -> None:
        with pytest.raises(ExpressionCaptureError, match="boolean"):
            capture(lambda b: b.code if b.discount else "")

    def test_len_aborts(self) -> None:
        with pytest.raises(ExpressionCaptureError, match="len"):
            capture(lambda b: len(b.items))

    def test_formatting_aborts(self) -> None:
        with pytest.raises(ExpressionCaptureError):
            capture(lambda b: f"{b.code}!")

    def test_keyword_arguments_abort(self) -> None:
        with pytest.raises(ExpressionCaptureError, match="Keyword"):
            capture(lambda b: b.code.split(sep=","))

    def test_other_errors_are_wrapped(self) -> None:
        def broken(b: Any) -> Any:
            raise KeyError("x")

        with pytest.raises(ExpressionCaptureError, match="Cannot trace"):
            capture(broken)

    def test_constant_result(self) -> None:
        expression = capture(lambda b: 42)
        assert isinstance(expression.body, Constant)
        assert expression.compile()(Basket()) == 42

    def test_lambda_passes_through(self) -> None:
        expression = capture(lambda b: b.code)
        assert capture(expression) is expression


class TestEvaluator:
    def test_compile_member_chain(self) -> None:
        fn = capture(lambda b: b.owner.name).compile()
        assert fn(Basket(owner=Owner("Ada"))) == "Ada"

    def test_compile_sequence_operators(self) -> None:
        basket = Basket(items=[Item("a", 2.0, 3), Item("b", 1.5, 2)])
        total = capture(lambda b: b.items.sum(lambda i: i.price * i.qty)).compile()
        names = capture(lambda b: b.items.where(lambda i: i.qty > 2).select(lambda i: i.name))
        assert total(basket) == 9.0
        assert names.compile()(basket) == ["a"]

    def test_nested_lambda_sees_outer_parameter(self) -> None:
        basket = Basket(discount=2, items=[Item("a", qty=1), Item("b", qty=3)])
        fn = capture(lambda b: b.items.count(lambda i: i.qty > b.discount)).compile()
        assert fn(basket) == 1

    def test_string_methods_still_work(self) -> None:
        fn = capture(lambda b: b.code.upper()).compile()
        assert fn(Basket(code="ab")) == "AB"

    def test_indexing(self) -> None:
        fn = capture(lambda b: b.items[0].name).compile()
        assert fn(Basket(items=[Item("first")])) == "first"

    def test_conditional_node(self) -> None:
        p = Parameter("x")
        test = Binary(">", p, Constant(0))
        fn = Lambda(p, Conditional(test, Constant("pos"), Constant("neg"))).compile()
        assert fn(1) == "pos"
        assert fn(-1) == "neg"


class TestOperators:
    def test_first_raises_on_empty(self) -> None:
        with pytest.raises(ValueError):
            invoke([], "first", [])

    def test_first_or_default(self) -> None:
        assert invoke([], "first_or_default", []) is None
        assert invoke([1, 2], "first_or_default", [lambda x: x > 1]) == 2

    def test_average(self) -> None:
        assert invoke([1, 2, 3], "average", []) == 2

    def test_distinct_keeps_order(self) -> None:
        assert invoke([3, 1, 3, 2, 1], "distinct", []) == [3, 1, 2]

    def test_any_all(self) -> None:
        assert invoke([1, 2], "any", [lambda x: x > 1]) is True
        assert invoke([1, 2], "all", [lambda x: x > 1]) is False

    def test_sum_of_empty_is_zero(self) -> None:
        assert invoke([], "sum", []) == 0

    def test_materializers(self) -> None:
        assert invoke([1, 1], "to_tuple", []) == (1, 1)
        assert invoke([1, 1], "to_set", []) == {1}

    def test_non_sequence_uses_method(self) -> None:
        assert invoke("a,b", "split", [","]) == ["a", "b"]


class TestNullSafeEvaluate:
    def test_none_source(self) -> None:
        assert evaluate(capture(lambda b: b.code), None) is None

    def test_stops_at_none_link(self) -> None:
        assert evaluate(capture(lambda b: b.owner.name.upper()), Basket(owner=None)) is None

    def test_full_chain(self) -> None:
        basket = Basket(owner=Owner("ada"))
        assert evaluate(capture(lambda b: b.owner.name.upper()), basket) == "ADA"

    def test_failed_invocation_yields_none(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="type_sync.expressions.nullsafe"):
            result = evaluate(capture(lambda b: b.items.max(lambda i: i.price)), Basket())
        assert result is None
        assert caplog.records

    def test_non_chain_falls_back_to_function(self) -> None:
        expression = capture(lambda b: b.discount * 2)
        assert decompose(expression) is None
        assert evaluate(expression, Basket(discount=4)) == 8

    def test_non_chain_failure_yields_none(self) -> None:
        expression = capture(lambda b: b.owner.name + "!")
        assert evaluate(expression, Basket(owner=None)) is None

    def test_converts_to_expected_value_type(self) -> None:
        assert evaluate(capture(lambda b: b.code), Basket(code="12"), int) == 12

    def test_conversion_failure_yields_none(self) -> None:
        assert evaluate(capture(lambda b: b.code), Basket(code="x"), int) is None

    def test_decompose_orders_steps(self) -> None:
        steps = decompose(capture(lambda b: b.owner.name.upper()))
        assert steps is not None
        assert [getattr(s, "name", None) or getattr(s, "method", None) for s in steps] == [
            "owner",
            "name",
            "upper",
        ]



class TestCallOrEvaluate:
    def test_function_result_wins_over_traced_chain(self) -> None:
        expression = capture(lambda b: b.code if b.code is not None else "none")
        assert str(expression) == "lambda b: b.code"
        assert call_or_evaluate(expression, Basket(code=None)) == "none"  # type: ignore[arg-type]

    def test_raising_function_walks_chain(self) -> None:
        expression = capture(lambda b: b.owner.name.upper())
        assert call_or_evaluate(expression, Basket(owner=None)) is None

    def test_unsupported_aggregate_walks_chain(self) -> None:
        basket = Basket(items=[Item(price=2.0), Item(price=5.0)])
        expression = capture(lambda b: b.items.max(lambda i: i.price))
        assert call_or_evaluate(expression, basket) == 5.0

    def test_result_is_converted(self) -> None:
        expression = capture(lambda b: b.code)
        assert call_or_evaluate(expression, Basket(code="12"), int) == 12


class TestGuardChain:
    def test_guards_each_intermediate_link(self) -> None:
        expression = capture(lambda b: b.owner.name.upper())
        guarded = guard_chain(expression.body)
        assert str(guarded) == (
            "(None if (b.owner is None) else "
            "(None if (b.owner.name is None) else b.owner.name.upper()))"
        )

    def test_guarded_chain_evaluates_to_default(self) -> None:
        expression = capture(lambda b: b.owner.name)
        guarded = Lambda(expression.parameter, guard_chain(expression.body, "n/a"))
        assert guarded.compile()(Basket()) == "n/a"
        assert guarded.compile()(Basket(owner=Owner("Ada"))) == "Ada"

    def test_guards_chains_inside_other_nodes(self) -> None:
        expression = capture(lambda b: b.owner.name + "!")
        guarded = Lambda(expression.parameter, guard_chain(expression.body))
        assert isinstance(guarded.body, Binary)
        assert isinstance(guarded.body.left, Conditional)

    def test_parameter_replacer(self) -> None:
        expression = capture(lambda b: b.owner.name)
        other = Parameter("src", Basket)
        replaced = ParameterReplacer(expression.parameter, other).visit(expression.body)
        assert str(replaced) == "src.owner.name"
        assert str(expression.body) == "b.owner.name"
