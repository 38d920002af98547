from __future__ import annotations

import importlib.util
import unittest


JAX_AVAILABLE = importlib.util.find_spec("jax") is not None


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for runtime semantics tests")
class ExpressionEvaluationTests(unittest.TestCase):
    def test_determinant_of_assigned_matrix(self) -> None:
        from lala import DoubleValue, evaluate

        self.assertEqual(evaluate("x = [[1,2],[3,4]]\ndet(x)"), DoubleValue(-2.0))
        self.assertEqual(evaluate("x = [1 2; 3 4]\n$x"), DoubleValue(-2.0))

    def test_dot_with_identity(self) -> None:
        from lala import MatrixValue, evaluate

        out = evaluate("dot([[1,0],[0,1]], [[5,6],[7,8]])")
        self.assertIsInstance(out, MatrixValue)
        assert isinstance(out, MatrixValue)
        self.assertEqual(out.matrix.tolist(), [[5.0, 6.0], [7.0, 8.0]])

    def test_literals(self) -> None:
        from lala import DoubleValue, IntegerValue, evaluate

        self.assertEqual(evaluate("42"), IntegerValue(42))
        self.assertEqual(evaluate("-1.5"), DoubleValue(-1.5))

    def test_monadic_verbs(self) -> None:
        from lala import IntegerValue, evaluate

        self.assertEqual(evaluate("#[1 2; 2 4]"), IntegerValue(1))
        self.assertEqual(evaluate("rank([1 0; 0 1])"), IntegerValue(2))
        self.assertEqual(evaluate(">+[1 2 3]").matrix.tolist(), [[1.0], [2.0], [3.0]])
        self.assertEqual(evaluate(">>[[1,2],[3,4]]").matrix.tolist(), [[1.0, 0.0], [0.0, 1.0]])
        self.assertEqual(evaluate("?[2 1; 1 1]").matrix.tolist(), [[1.0, -1.0], [-1.0, 2.0]])

    def test_dyadic_verbs(self) -> None:
        from lala import evaluate

        self.assertEqual(evaluate("[1 2] ++ [3 4]").matrix.tolist(), [[4.0, 6.0]])
        self.assertEqual(evaluate("[1 2] ** [3 4]").matrix.tolist(), [[3.0, 8.0]])
        self.assertEqual(evaluate("[1 2] @ [3; 4]").matrix.tolist(), [[11.0]])
        self.assertEqual(evaluate("times([2 2], plus([1 1], [1 1]))").matrix.tolist(), [[4.0, 4.0]])

    def test_matrix_verbs_reject_scalars(self) -> None:
        from lala import TypeMismatch, evaluate

        with self.assertRaises(TypeMismatch) as ctx:
            evaluate("x = 3\n?x")
        self.assertEqual(ctx.exception.op, "inverse")

        with self.assertRaises(TypeMismatch):
            evaluate("[[1]] ++ 2")
        with self.assertRaises(TypeMismatch):
            evaluate("det(2.5)")

    def test_engine_errors_pass_through(self) -> None:
        from lala import DimensionMismatch, NotSquare, SingularMatrix, evaluate

        with self.assertRaises(DimensionMismatch):
            evaluate("[1 2] ++ [1 2 3]")
        with self.assertRaises(DimensionMismatch):
            evaluate("[1 2] @ [1 2]")
        with self.assertRaises(NotSquare):
            evaluate("det([1 2 3])")
        with self.assertRaises(SingularMatrix):
            evaluate("inv([1 2; 2 4])")

    def test_undefined_variable(self) -> None:
        from lala import UndefinedVariable, evaluate

        with self.assertRaises(UndefinedVariable) as ctx:
            evaluate("missing")
        self.assertEqual(ctx.exception.name, "missing")

    def test_matrix_literal_cells_must_be_numeric(self) -> None:
        from lala.ast import Ident, IntLiteral, MatrixLiteral
        from lala.errors import InvalidMatrixCell
        from lala.evaluator import construct_matrix

        with self.assertRaises(InvalidMatrixCell) as ctx:
            construct_matrix(MatrixLiteral(rows=((IntLiteral(1), Ident("x")),)))
        self.assertEqual((ctx.exception.row, ctx.exception.col), (0, 1))

    def test_ragged_matrix_literal_is_recoverable(self) -> None:
        from lala.ast import IntLiteral, MatrixLiteral
        from lala.environment import Environment
        from lala.errors import InvalidMatrixShape
        from lala.evaluator import eval_expr

        ragged = MatrixLiteral(rows=((IntLiteral(1),), (IntLiteral(1), IntLiteral(2))))
        with self.assertRaises(InvalidMatrixShape):
            eval_expr(ragged, Environment())
        with self.assertRaises(InvalidMatrixShape):
            eval_expr(MatrixLiteral(rows=()), Environment())

    def test_statements_are_not_expressions(self) -> None:
        from lala.ast import Assignment, IntLiteral
        from lala.environment import Environment
        from lala.errors import InvalidExpression
        from lala.evaluator import eval_expr

        with self.assertRaises(InvalidExpression):
            eval_expr(Assignment(ident="x", expr=IntLiteral(1)), Environment())


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for runtime semantics tests")
class FunctionApplicationTests(unittest.TestCase):
    def test_function_with_local_assignment(self) -> None:
        from lala import evaluate

        out = evaluate("fun f(a,b) { c = a ++ b; c }\nf([[1,2]], [[3,4]])")
        self.assertEqual(out.matrix.tolist(), [[4.0, 6.0]])

    def test_declaration_does_not_evaluate_body(self) -> None:
        from lala import Environment, FunctionValue, run

        env = Environment()
        self.assertEqual(run("fun f(a) { b = ?a; b }", env), "defined fun f(a)")
        self.assertIsInstance(env["f"], FunctionValue)

    def test_undeclared_function(self) -> None:
        from lala import UndefinedFunction, evaluate

        with self.assertRaises(UndefinedFunction) as ctx:
            evaluate("g([1])")
        self.assertEqual(ctx.exception.name, "g")

        with self.assertRaises(UndefinedFunction):
            evaluate("g = [1]\ng([1])")

    def test_arity_mismatch(self) -> None:
        from lala import ArityMismatch, evaluate

        with self.assertRaises(ArityMismatch) as ctx:
            evaluate("fun f(a, b) { a }\nf([1])")
        self.assertEqual((ctx.exception.expected, ctx.exception.found), (2, 1))

    def test_call_scope_mutations_do_not_escape(self) -> None:
        from lala import Environment, MatrixValue, evaluate

        env = Environment()
        out = evaluate("c = [9]\nfun f(a) { c = a; c }\nf([1])", env)
        self.assertEqual(out.matrix.tolist(), [[1.0]])
        self.assertEqual(env["c"].matrix.tolist(), [[9.0]])
        self.assertNotIn("a", env)
        self.assertIsInstance(env["c"], MatrixValue)

    def test_call_scope_is_copied_at_call_time(self) -> None:
        from lala import evaluate

        out = evaluate("k = [1]\nfun g() { k }\nk = [2]\ng()")
        self.assertEqual(out.matrix.tolist(), [[2.0]])

    def test_arguments_see_earlier_parameter_bindings(self) -> None:
        from lala import evaluate

        # `a` in the second argument resolves to the first parameter, not the caller's `a`.
        out = evaluate("a = [5]\nfun h(a, b) { b }\nh([1], a)")
        self.assertEqual(out.matrix.tolist(), [[1.0]])

    def test_nested_declaration_stays_local(self) -> None:
        from lala import Environment, evaluate

        env = Environment()
        out = evaluate("fun outer(a) { fun inner(b) { b }; r = inner(a); r }\nouter([7])", env)
        self.assertEqual(out.matrix.tolist(), [[7.0]])
        self.assertNotIn("inner", env)
        self.assertNotIn("r", env)

    def test_body_may_only_assign_or_declare(self) -> None:
        from lala import InvalidFunctionBody, evaluate

        with self.assertRaises(InvalidFunctionBody):
            evaluate("fun f(a) { a ++ a; a }\nf([1])")

    def test_body_must_end_with_identifier(self) -> None:
        from lala import InvalidReturnStatement, evaluate

        with self.assertRaises(InvalidReturnStatement) as ctx:
            evaluate("fun f(a) { b = a }\nf([1])")
        self.assertEqual(ctx.exception.node, "Assignment")

        with self.assertRaises(InvalidReturnStatement):
            evaluate("fun f(a) { a ++ a }\nf([1])")

        with self.assertRaises(InvalidReturnStatement) as empty:
            evaluate("fun f() { }\nf()")
        self.assertIsNone(empty.exception.node)

    def test_return_name_must_be_bound(self) -> None:
        from lala import UndefinedVariable, evaluate

        with self.assertRaises(UndefinedVariable):
            evaluate("fun f(a) { nothing }\nf([1])")

    def test_runaway_recursion_is_reported(self) -> None:
        from lala import CallDepthExceeded, evaluate

        with self.assertRaises(CallDepthExceeded):
            evaluate("fun f(a) { b = f(a); b }\nf([1])")


if __name__ == "__main__":
    unittest.main()
