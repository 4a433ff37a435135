"""
Formula parsing.

Turns a formula such as ``"Lottery ~ Literacy + LogPopulation"`` into a
ParsedFormula: the response name, the ordered predictor names and whether
the model has an intercept.

Grammar (whitespace is insignificant between tokens):

    formula      := response '~' term (('+' term) | no-intercept)*
    response     := identifier
    term         := identifier
    no-intercept := '-' whitespace* ('1' | '1.0' | '1.')

Identifiers are runs of Unicode letters and digits. A predictor named more
than once is kept at its first position.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache

from pyols.core.exceptions import FormulaError

logger = logging.getLogger(__name__)

INTERCEPT_NAME = 'Intercept'

_NO_INTERCEPT_LITERALS = frozenset({'1', '1.', '1.0'})


@dataclass(frozen=True)
class ParsedFormula:
    """
    Structured form of a regression formula.

    Attributes:
        response: Name of the response (dependent) variable
        predictors: Predictor names, first-appearance order, no repeats
        has_intercept: False when the formula contains '- 1'
        text: The formula this was parsed from (not part of equality)
    """
    response: str
    predictors: tuple[str, ...]
    has_intercept: bool = True
    text: str = field(default='', compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.response in self.predictors:
            raise FormulaError(
                f"Response variable '{self.response}' also appears as a predictor"
                + (f" in formula {self.text!r}" if self.text else ""),
                formula=self.text or None,
            )

    @property
    def exog_names(self) -> tuple[str, ...]:
        """Design-matrix column names, 'Intercept' first when present."""
        if self.has_intercept:
            return (INTERCEPT_NAME,) + self.predictors
        return self.predictors

    @property
    def fields(self) -> tuple[str, ...]:
        """Every field name the formula reads from the data, response first."""
        return (self.response,) + self.predictors

    def to_formula(self) -> str:
        """Canonical formula text; parsing it gives back an equal ParsedFormula."""
        text = f"{self.response} ~ " + " + ".join(self.predictors)
        if not self.has_intercept:
            text = f"{text} - 1" if self.predictors else f"{text}- 1"
        return text.rstrip()

    def __str__(self) -> str:
        return self.to_formula()


class FormulaParser:
    """
    Single-use scanner over one formula string.

    The scanner walks an index through the text. Until the response is
    found only whitespace and ``identifier ~`` are accepted; afterwards
    it accepts whitespace, identifiers, '+' separators and the '- 1'
    intercept suppression.
    """

    def __init__(self, text: str):
        if not isinstance(text, str):
            raise FormulaError(
                f"Formula must be a string, got {type(text).__name__}"
            )
        self.text = text
        self.pos = 0
        self.response: str | None = None
        self.predictors: list[str] = []
        self.has_intercept = True
        self._seen: set[str] = set()

    def parse(self) -> ParsedFormula:
        """
        Scan the whole text.

        Raises:
            FormulaError: No response variable, an unrecognized character,
                or the response used as a predictor
        """
        while self.pos < len(self.text):
            ch = self.text[self.pos]
            if ch.isspace():
                self.pos += 1
            elif self.response is None:
                self._read_response()
            elif ch == '-':
                self._read_no_intercept()
            elif ch == '+':
                self.pos += 1
            elif ch.isalnum():
                self._add_predictor(self._read_identifier())
            else:
                raise self._unrecognized(self.pos)

        if self.response is None:
            raise FormulaError(
                f"No response variable found in formula {self.text!r}; "
                f"expected 'response ~ predictors'",
                formula=self.text,
            )

        return ParsedFormula(
            response=self.response,
            predictors=tuple(self.predictors),
            has_intercept=self.has_intercept,
            text=self.text,
        )

    def _read_identifier(self) -> str:
        start = self.pos
        while self.pos < len(self.text) and self.text[self.pos].isalnum():
            self.pos += 1
        return self.text[start:self.pos]

    def _read_response(self) -> None:
        start = self.pos
        if not self.text[start].isalnum():
            raise self._no_response(start)
        name = self._read_identifier()
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1
        if self.pos >= len(self.text) or self.text[self.pos] != '~':
            raise self._no_response(self.pos)
        self.pos += 1
        self.response = name

    def _read_no_intercept(self) -> None:
        start = self.pos
        i = start + 1
        while i < len(self.text) and self.text[i].isspace():
            i += 1
        # Take the whole token so '- 10' and '- 1.5' are rejected
        end = i
        while end < len(self.text) and (self.text[end].isalnum() or self.text[end] == '.'):
            end += 1
        if self.text[i:end] not in _NO_INTERCEPT_LITERALS:
            raise self._unrecognized(start)
        self.pos = end
        self.has_intercept = False

    def _add_predictor(self, name: str) -> None:
        if name in self._seen:
            return
        self._seen.add(name)
        self.predictors.append(name)

    def _no_response(self, position: int) -> FormulaError:
        return FormulaError(
            f"No response variable found in formula {self.text!r}; "
            f"expected 'response ~ predictors'",
            formula=self.text,
            position=position,
            character=self.text[position] if position < len(self.text) else None,
        )

    def _unrecognized(self, position: int) -> FormulaError:
        ch = self.text[position]
        return FormulaError(
            f"Unrecognized character {ch!r} at position {position} in formula {self.text!r}",
            formula=self.text,
            position=position,
            character=ch,
        )


def parse_formula(formula: str) -> ParsedFormula:
    """
    Parse a regression formula.

    Args:
        formula: Text such as ``"Y ~ X1 + X2"`` or ``"Y ~ X - 1"``

    Returns:
        ParsedFormula (cached per formula string; instances are immutable)

    Raises:
        FormulaError: If the text does not follow the formula grammar

    Example:
        >>> parse_formula("Y ~ X1 + X2 - 1")
        ParsedFormula(response='Y', predictors=('X1', 'X2'), has_intercept=False)
    """
    if not isinstance(formula, str):
        raise FormulaError(
            f"Formula must be a string, got {type(formula).__name__}"
        )
    return _parse_cached(formula)


@lru_cache(maxsize=256)
def _parse_cached(formula: str) -> ParsedFormula:
    parsed = FormulaParser(formula).parse()
    logger.debug(
        "Parsed formula %r: response=%s predictors=%s intercept=%s",
        formula, parsed.response, parsed.predictors, parsed.has_intercept,
    )
    return parsed
