"""64-bit floating point arithmetic for the math language. Everything follows IEEE-754: division by zero, overflow and
out-of-domain function arguments give inf/NaN instead of raising, so the evaluator and compiled programs agree.

numpy is used because Python's own float operators and the math module raise on exactly those cases
(ZeroDivisionError, OverflowError, "math domain error").
"""

from decimal import Decimal

import numpy as np


FUNCTIONS = {
    "sin": np.sin,
    "cos": np.cos,
    "tan": np.tan,
    "asin": np.arcsin,
    "acos": np.arccos,
    "atan": np.arctan,
    "sinh": np.sinh,
    "cosh": np.cosh,
    "tanh": np.tanh,
    "asinh": np.arcsinh,
    "acosh": np.arccosh,
    "atanh": np.arctanh,
    "exp": np.exp,
    "exp2": np.exp2,
    "ln": np.log,
    "log10": np.log10,
    "log2": np.log2,
    "abs": np.abs,
    "ceil": np.ceil,
    "floor": np.floor,
    "sqrt": np.sqrt,
}


def signum(value):
    """Sign of value as a float: 1.0 for +0.0 and -1.0 for -0.0 (unlike numpy.sign), NaN for NaN."""
    if np.isnan(value):
        return np.float64("nan")
    return np.copysign(np.float64(1.0), value)


FUNCTIONS["signum"] = signum


def binary(op, lhs, rhs):
    """Applies binary operator op ("+", "-", "mod", "*", "/" or "^") to lhs and rhs. mod is the C fmod: the result
    has the sign of lhs.
    """
    lhs, rhs = np.float64(lhs), np.float64(rhs)
    with np.errstate(all="ignore"):
        if op == "+":
            result = lhs + rhs
        elif op == "-":
            result = lhs - rhs
        elif op == "mod":
            result = np.fmod(lhs, rhs)
        elif op == "*":
            result = lhs * rhs
        elif op == "/":
            result = np.divide(lhs, rhs)
        elif op == "^":
            result = np.power(lhs, rhs)
        else:
            raise ValueError(f"unknown operator '{op}'")
    return float(result)


def apply(function, value):
    """Applies the elementary function named function to value."""
    with np.errstate(all="ignore"):
        return float(FUNCTIONS[function](np.float64(value)))


def negate(value):
    return -float(value)


def format_value(value):
    """Canonical decimal text of a float: shortest round-trip digits, never in exponent notation, and without a
    trailing '.0' for integral values. Identical to how Rust displays an f64 ('146', '0.5', '-0', 'inf', 'NaN').
    """
    value = float(value)
    if np.isnan(value):
        return "NaN"
    elif np.isinf(value):
        return "inf" if value > 0 else "-inf"
    return format(Decimal(repr(value)).normalize(), "f")


def parse_number(text):
    """Parses one line of input into a float, or returns None if it is not a number."""
    text = text.strip()
    if not text or "_" in text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def literal(value):
    """Rust f64 literal for value. Non-finite values become the std::f64 constants."""
    text = format_value(value)
    if text == "NaN":
        return "f64::NAN"
    elif text == "inf":
        return "f64::INFINITY"
    elif text == "-inf":
        return "f64::NEG_INFINITY"
    return f"{text}f64"
