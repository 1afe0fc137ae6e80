"""
Text parser for hornlog clauses and queries.

Accepted forms (case-sensitive):

    parent(john, mary).              fact
    ready.                           zero-arity fact
    grandparent(X, Z) :- parent(X, Y), parent(Y, Z).
    sibling(X, Y) :- parent(P, X), parent(P, Y), not same(X, Y).
    parent(john, X), not likes(X, broccoli).    query
    X is 2 + 3 * Y, X >= 10.                    query with built-ins

Arguments: "..." is a String, integer and float literals are numbers,
an identifier starting with an uppercase letter is a Variable, any other
identifier is an Atom, and name(...) is a Compound. Arithmetic written with
+ - * / builds compounds such as +(2, 3). The trailing '.' is optional on a
single fact, rule or query.
"""

import re
from typing import List, NamedTuple, Optional, Tuple

from .errors import ParseError
from .knowledge import Fact, Goal, Rule
from .terms import Term, Atom, Variable, Integer, Float, String, Compound


class Token(NamedTuple):
    kind: str
    text: str
    pos: int


TOKEN_PATTERNS = [
    ("COMMENT", r"%[^\n]*"),
    ("SPACE", r"\s+"),
    ("STRING", r'"(?:[^"\\]|\\.)*"'),
    ("NUMBER", r"\d+(?:\.\d+)?(?:[eE][+-]?\d+)?"),
    ("NAME", r"[^\W\d]\w*"),
    ("NECK", r":-"),
    ("OP", r"<=|>=|=<|[=<>+\-*/]"),
    ("PUNCT", r"[(),.]"),
]

TOKEN_RE = re.compile("|".join(f"(?P<{kind}>{pattern})" for kind, pattern in TOKEN_PATTERNS))

RELATIONS = {"=": "=", "<": "<", ">": ">", "<=": "<=", "=<": "<=", ">=": ">=", "is": "is"}

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


def tokenize(text: str) -> List[Token]:
    """
    Split text into tokens, dropping whitespace and % comments.

    Raises:
        ParseError: on a character no token can start with
    """
    tokens = []
    pos = 0
    while pos < len(text):
        match = TOKEN_RE.match(text, pos)
        if match is None:
            raise ParseError(f"Unexpected character {text[pos]!r}", text, pos)
        kind = match.lastgroup
        if kind not in ("SPACE", "COMMENT"):
            tokens.append(Token(kind, match.group(), pos))
        pos = match.end()
    tokens.append(Token("EOF", "", len(text)))
    return tokens


def _number_term(text: str, negative: bool = False) -> Term:
    """Integer when the literal fits in 64 bits, Float otherwise"""
    if negative:
        text = "-" + text
    if re.fullmatch(r"-?\d+", text):
        value = int(text)
        if INT64_MIN <= value <= INT64_MAX:
            return Integer(value)
    return Float(float(text))


def _unescape(literal: str) -> str:
    return re.sub(r"\\(.)", r"\1", literal[1:-1])


class _Parser:
    """Recursive descent over a token list"""

    def __init__(self, text: str):
        self.text = text
        self.tokens = tokenize(text)
        self.index = 0

    # -- token helpers -------------------------------------------------

    @property
    def current(self) -> Token:
        return self.tokens[self.index]

    def peek(self, offset: int = 1) -> Token:
        return self.tokens[min(self.index + offset, len(self.tokens) - 1)]

    def advance(self) -> Token:
        token = self.current
        if token.kind != "EOF":
            self.index += 1
        return token

    def at(self, text: str) -> bool:
        token = self.current
        return token.kind != "STRING" and token.text == text

    def expect(self, text: str) -> Token:
        if not self.at(text):
            self.error(f"Expected '{text}'")
        return self.advance()

    def error(self, message: str) -> None:
        token = self.current
        found = "end of input" if token.kind == "EOF" else repr(token.text)
        raise ParseError(f"{message}, found {found}", self.text, token.pos)

    def at_end(self) -> bool:
        return self.current.kind == "EOF"

    def skip_period(self) -> None:
        if self.at("."):
            self.advance()

    def expect_end(self) -> None:
        if not self.at_end():
            self.error("Unexpected trailing input")

    # -- grammar -------------------------------------------------------

    def literal(self) -> Fact:
        """name or name(arg, ...) as it appears in a head or fact"""
        token = self.current
        if token.kind != "NAME":
            self.error("Expected a predicate name")
        if token.text[0].isupper():
            self.error("Predicate names cannot start with an uppercase letter")
        self.advance()
        return Fact(token.text, self.arguments())

    def arguments(self) -> List[Term]:
        if not self.at("("):
            return []
        self.advance()
        args: List[Term] = []
        if self.at(")"):
            self.advance()
            return args
        args.append(self.expression())
        while self.at(","):
            self.advance()
            args.append(self.expression())
        self.expect(")")
        return args

    def goal(self) -> Goal:
        """A body/query literal, optionally negated, possibly infix"""
        negated = False
        if self.current.kind == "NAME" and self.current.text == "not" and self.peek().kind == "NAME":
            self.advance()
            negated = True

        start = self.current
        left = self.expression()
        relation = self.relation()
        if relation is not None:
            self.advance()
            right = self.expression()
            return Goal(relation, [left, right], negated)

        if isinstance(left, Compound):
            return Goal(left.functor, left.args, negated)
        if isinstance(left, Atom):
            return Goal(left.name, [], negated)
        raise ParseError(f"Expected a goal, found {left}", self.text, start.pos)

    def relation(self) -> Optional[str]:
        token = self.current
        if token.kind in ("OP", "NAME") and token.text in RELATIONS:
            return RELATIONS[token.text]
        return None

    def body(self) -> List[Goal]:
        goals = [self.goal()]
        while self.at(","):
            self.advance()
            goals.append(self.goal())
        return goals

    def expression(self) -> Term:
        term = self.product()
        while self.current.kind == "OP" and self.current.text in ("+", "-"):
            op = self.advance().text
            term = Compound(op, [term, self.product()])
        return term

    def product(self) -> Term:
        term = self.factor()
        while self.current.kind == "OP" and self.current.text in ("*", "/"):
            op = self.advance().text
            term = Compound(op, [term, self.factor()])
        return term

    def factor(self) -> Term:
        token = self.current

        if token.kind == "PUNCT" and token.text == "(":
            self.advance()
            term = self.expression()
            self.expect(")")
            return term

        if token.kind == "OP" and token.text == "-" and self.peek().kind == "NUMBER":
            self.advance()
            return _number_term(self.advance().text, negative=True)

        if token.kind == "NUMBER":
            self.advance()
            return _number_term(token.text)

        if token.kind == "STRING":
            self.advance()
            return String(_unescape(token.text))

        if token.kind == "NAME":
            self.advance()
            if token.text[0].isupper():
                return Variable(token.text)
            if self.at("("):
                args = self.arguments()
                if args:
                    return Compound(token.text, args)
            return Atom(token.text)

        # Operator symbols used in prefix form, e.g. +(2, 3)
        if token.kind == "OP" and self.peek().text == "(":
            self.advance()
            args = self.arguments()
            return Compound(RELATIONS.get(token.text, token.text), args)

        self.error("Expected a term")

    # -- clause level --------------------------------------------------

    def clause(self):
        """Fact or rule up to and including its terminating period"""
        head = self.literal()
        if self.at(":-"):
            self.advance()
            return Rule(head, self.body())
        return head


# ============================================================================
# Public API
# ============================================================================

def parse_term(text: str) -> Term:
    """Parse a single term, e.g. 'f(X, "s", 3.5)'"""
    parser = _Parser(text)
    term = parser.expression()
    parser.expect_end()
    return term


def parse_fact(text: str) -> Fact:
    """
    Parse 'name(arg, ...).' or 'name.' into a Fact.

    Raises:
        ParseError: malformed text, or the text is a rule
    """
    parser = _Parser(text)
    fact = parser.literal()
    if parser.at(":-"):
        parser.error("Expected a fact, not a rule")
    parser.skip_period()
    parser.expect_end()
    return fact


def parse_rule(text: str) -> Rule:
    """
    Parse 'head :- goal, goal, ... .' into a Rule.

    Raises:
        ParseError: malformed text, or no ':-' present
    """
    if ":-" not in text:
        raise ParseError("Invalid rule format: missing ':-'", text)
    parser = _Parser(text)
    head = parser.literal()
    parser.expect(":-")
    rule = Rule(head, parser.body())
    parser.skip_period()
    parser.expect_end()
    return rule


def parse_query(text: str) -> List[Goal]:
    """
    Parse a comma-separated goal list; each goal may be prefixed by 'not '.

    Raises:
        ParseError: malformed or empty query
    """
    parser = _Parser(text)
    if parser.at_end():
        raise ParseError("Empty query", text)
    goals = parser.body()
    parser.skip_period()
    parser.expect_end()
    return goals


def parse_program(text: str) -> Tuple[List[Fact], List[Rule]]:
    """
    Parse a sequence of facts and rules, each terminated by '.'.

    Lines starting with % are comments.

    Returns:
        (facts, rules) in source order
    """
    parser = _Parser(text)
    facts: List[Fact] = []
    rules: List[Rule] = []
    while not parser.at_end():
        clause = parser.clause()
        if isinstance(clause, Rule):
            rules.append(clause)
        else:
            facts.append(clause)
        if parser.at_end():
            break
        parser.expect(".")
    return facts, rules
