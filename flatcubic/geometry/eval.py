import ast, math, operator as op
from typing import Any, Dict

ALLOWED = {
    "abs": abs, "min": min, "max": max, "round": round,
    "sqrt": math.sqrt, "sin": math.sin, "cos": math.cos, "pi": math.pi,
}
OPS = {
    ast.Add: op.add, ast.Sub: op.sub, ast.Mult: op.mul, ast.Div: op.truediv,
    ast.Pow: op.pow, ast.USub: op.neg, ast.UAdd: op.pos,
}

def _eval(node, env):
    if isinstance(node, ast.Constant):
        if isinstance(node.value, bool) or not isinstance(node.value, (int, float)):
            raise ValueError(f"constant not allowed: {node.value!r}")
        return node.value
    if isinstance(node, ast.BinOp):
        fn = OPS.get(type(node.op))
        if fn is None:
            raise ValueError(f"operator not allowed: {type(node.op).__name__}")
        return fn(_eval(node.left, env), _eval(node.right, env))
    if isinstance(node, ast.UnaryOp):
        fn = OPS.get(type(node.op))
        if fn is None:
            raise ValueError(f"operator not allowed: {type(node.op).__name__}")
        return fn(_eval(node.operand, env))
    if isinstance(node, ast.Name):
        if node.id in env: return env[node.id]
        if node.id in ALLOWED: return ALLOWED[node.id]
        raise ValueError(f"name not allowed: {node.id}")
    if isinstance(node, ast.Call):
        if node.keywords:
            raise ValueError("keyword arguments not allowed")
        func = _eval(node.func, env)
        if not callable(func):
            raise ValueError("bad call target")
        args = [_eval(a, env) for a in node.args]
        return func(*args)
    raise ValueError("bad expression")

def eval_expr(expr: str, env: Dict[str, Any]) -> float:
    """Evaluate an arithmetic expression over ``env`` and the whitelisted helpers."""
    try:
        tree = ast.parse(expr, mode="eval").body
    except SyntaxError as e:
        raise ValueError(f"bad expression: {expr!r}") from e
    return float(_eval(tree, env))
