import math

import pytest

from diffusionsim.errors import ArityError, CompileError, ConstructionError
from diffusionsim.model.evaluator import Evaluator, FormulaEvaluator, FunctionEvaluator, check_arity, compile_formula


def test_sine_formula_with_pi_constant():
    f = compile_formula("100*sin(PI*x/200)", 1)
    assert f.evaluate((100.0,)) == pytest.approx(100.0)
    assert f.evaluate((0.0,)) == pytest.approx(0.0)


def test_two_argument_formula_binds_time_then_position():
    f = compile_formula("x - 2*t", 2)
    assert f.evaluate((1.0, 5.0)) == pytest.approx(3.0)


def test_exact_solution_formula():
    f = compile_formula("100*exp(-(PI/200)^2*t)*sin(PI*x/200)", 2)
    expected = 100 * math.exp(-(math.pi / 200) ** 2 * 30.0) * math.sin(math.pi * 50.0 / 200)
    assert f.evaluate((30.0, 50.0)) == pytest.approx(expected)


def test_caret_is_power_and_implicit_multiplication():
    assert compile_formula("2^3", 1).evaluate((0.0,)) == pytest.approx(8.0)
    assert compile_formula("3x", 1).evaluate((2.0,)) == pytest.approx(6.0)


def test_single_argument_formula_accepts_any_variable_name():
    f = compile_formula("10*t + 1", 1)
    assert f.variables == ("t",)
    assert f.evaluate((2.0,)) == pytest.approx(21.0)


def test_constant_formula_ignores_its_argument():
    f = compile_formula("0", 1)
    assert f.evaluate((123.0,)) == 0.0
    assert isinstance(f.evaluate((1.0,)), float)


def test_too_many_variables_is_a_compile_error():
    with pytest.raises(CompileError):
        compile_formula("t*x", 1)
    with pytest.raises(CompileError):
        compile_formula("t*x*y", 2)


def test_malformed_formula_is_a_compile_error():
    with pytest.raises(CompileError) as excinfo:
        compile_formula("2*(x", 1)
    assert excinfo.value.formula == "2*(x"
    assert isinstance(excinfo.value, ConstructionError)


def test_explicit_variables():
    f = FormulaEvaluator("a + 10*b", 2, variables=("a", "b"))
    assert f.evaluate((1.0, 2.0)) == pytest.approx(21.0)
    with pytest.raises(ArityError):
        FormulaEvaluator("a", 2, variables=("a",))


def test_wrong_argument_count_raises_arity_error():
    f = compile_formula("x", 1)
    with pytest.raises(ArityError):
        f.evaluate((1.0, 2.0))

    g = FunctionEvaluator(lambda t, x: t + x, 2)
    with pytest.raises(ArityError):
        g.evaluate((1.0,))


def test_function_evaluator_satisfies_protocol():
    g = FunctionEvaluator(lambda x: 2 * x, 1)
    assert isinstance(g, Evaluator)
    assert isinstance(compile_formula("x", 1), Evaluator)
    assert g.evaluate((4,)) == 8.0


def test_check_arity():
    check_arity(FunctionEvaluator(lambda x: x, 1), 1, "start")
    with pytest.raises(ArityError):
        check_arity(FunctionEvaluator(lambda t, x: x, 2), 1, "start")
    with pytest.raises(ArityError):
        check_arity(object(), 1, "start")


def test_complex_result_is_rejected():
    f = compile_formula("I*x", 1)
    with pytest.raises(ValueError, match="complex"):
        f.evaluate((2.0,))

    g = FunctionEvaluator(lambda x: complex(x, 1.0), 1)
    with pytest.raises(ValueError, match="complex"):
        g.evaluate((2.0,))
