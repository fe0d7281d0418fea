"""
Rule-based query router.

Decides whether a chat query can be answered deterministically (bypassing
the agent) and, if not, which agent should handle it. Rules are evaluated in
priority order; the first rule whose confidence is strictly above its cutoff
wins. Classification is a pure function of the query text.
"""

import re
from typing import Callable, List, Optional, Tuple

from ...types import QueryType, RoutingDecision, StrategyAction

PROTOCOLS = [
    "morpho", "aave", "compound", "uniswap", "curve",
    "yearn", "balancer", "convex", "frax",
]

DEPOSIT_KEYWORDS = ["deposit", "invest", "put", "stake", "supply", "lend", "add"]

WITHDRAW_KEYWORDS = ["withdraw", "remove", "unstake", "pull", "take out", "exit"]

RESEARCH_KEYWORDS = [
    "research", "analyze", "compare", "find", "show", "what",
    "which", "best", "top", "highest", "safest", "lowest risk",
]

STRATEGY_KEYWORDS = [
    "safest", "best", "optimal", "recommend", "suggest",
    "diversify", "spread", "allocate", "strategy",
]

PORTFOLIO_KEYWORDS = [
    "portfolio", "positions", "holdings", "balance",
    "how much", "my funds", "my deposits", "what do i have",
]

CONVERSATIONAL_PHRASES = [
    "hello", "hi", "hey", "thanks", "thank you", "bye",
    "goodbye", "yes", "no", "okay", "ok", "sure", "help",
]

DEFAULT_PROTOCOL = "Morpho"
DEFAULT_STRATEGY = "Lending"

COORDINATOR_AGENT = "coordinator"
STRATEGY_AGENT = "strategy"

AMOUNT_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(?:usdc|usd|dollars?)", re.IGNORECASE)
POSITION_PATTERNS = [
    re.compile(r"position\s*#?(\d+)", re.IGNORECASE),
    re.compile(r"from\s+(\d+)", re.IGNORECASE),
    re.compile(r"id\s*(\d+)", re.IGNORECASE),
]


def _contains_any(query: str, keywords: List[str]) -> bool:
    return any(kw in query for kw in keywords)


def extract_amount(query: str) -> Optional[str]:
    match = AMOUNT_RE.search(query)
    return match.group(1) if match else None


def extract_position_id(query: str) -> Optional[int]:
    for pattern in POSITION_PATTERNS:
        match = pattern.search(query)
        if match:
            return int(match.group(1))
    return None


def match_conversational(query: str) -> Optional[str]:
    """Return the phrase the query is or starts with, if any."""
    for phrase in CONVERSATIONAL_PHRASES:
        if query == phrase or query.startswith(phrase + " "):
            return phrase
    return None


def _no_match(query_type: QueryType) -> RoutingDecision:
    return RoutingDecision(type=query_type, confidence=0.0)


def parse_deposit(query: str) -> RoutingDecision:
    if not _contains_any(query, DEPOSIT_KEYWORDS):
        return _no_match(QueryType.SIMPLE_DEPOSIT)

    amount = extract_amount(query)
    protocol = next((p for p in PROTOCOLS if p in query), None)
    needs_research = _contains_any(query, RESEARCH_KEYWORDS)

    if amount and protocol and not needs_research:
        return RoutingDecision(
            type=QueryType.SIMPLE_DEPOSIT,
            confidence=0.95,
            params=StrategyAction(
                action="deposit",
                amount=amount,
                protocol=protocol.capitalize(),
                strategy=DEFAULT_STRATEGY,
            ),
            should_bypass_agent=True,
        )

    if amount and not protocol and not needs_research:
        return RoutingDecision(
            type=QueryType.SIMPLE_DEPOSIT,
            confidence=0.85,
            params=StrategyAction(
                action="deposit",
                amount=amount,
                protocol=DEFAULT_PROTOCOL,
                strategy=DEFAULT_STRATEGY,
            ),
            should_bypass_agent=True,
        )

    if needs_research:
        return RoutingDecision(
            type=QueryType.STRATEGY_COMPLEX,
            confidence=0.8,
            params=StrategyAction(action="deposit", amount=amount),
            agent_to_use=COORDINATOR_AGENT,
            reasoning_needed=True,
        )

    return RoutingDecision(
        type=QueryType.SIMPLE_DEPOSIT,
        confidence=0.5,
        agent_to_use=STRATEGY_AGENT,
    )


def parse_withdraw(query: str) -> RoutingDecision:
    if not _contains_any(query, WITHDRAW_KEYWORDS):
        return _no_match(QueryType.SIMPLE_WITHDRAW)

    position_id = extract_position_id(query)
    if position_id is not None:
        return RoutingDecision(
            type=QueryType.SIMPLE_WITHDRAW,
            confidence=0.95,
            params=StrategyAction(action="withdraw", position_id=position_id),
            should_bypass_agent=True,
        )

    if "everything" in query or "all" in query:
        return RoutingDecision(
            type=QueryType.SIMPLE_WITHDRAW,
            confidence=0.8,
            params=StrategyAction(action="withdraw"),
            agent_to_use=STRATEGY_AGENT,
        )

    return RoutingDecision(
        type=QueryType.SIMPLE_WITHDRAW,
        confidence=0.6,
        agent_to_use=STRATEGY_AGENT,
    )


def parse_portfolio(query: str) -> RoutingDecision:
    if _contains_any(query, PORTFOLIO_KEYWORDS):
        return RoutingDecision(
            type=QueryType.PORTFOLIO_CHECK,
            confidence=0.9,
            should_bypass_agent=True,
        )
    return _no_match(QueryType.PORTFOLIO_CHECK)


def parse_research(query: str) -> RoutingDecision:
    # Research without deposit intent and without an amount is research-only
    if (
        _contains_any(query, RESEARCH_KEYWORDS)
        and not _contains_any(query, DEPOSIT_KEYWORDS)
        and not AMOUNT_RE.search(query)
    ):
        return RoutingDecision(
            type=QueryType.RESEARCH_SIMPLE,
            confidence=0.9,
            agent_to_use=COORDINATOR_AGENT,
            reasoning_needed=True,
        )
    return _no_match(QueryType.RESEARCH_SIMPLE)


def parse_complex_strategy(query: str) -> RoutingDecision:
    wants_analysis = _contains_any(query, RESEARCH_KEYWORDS) or _contains_any(query, STRATEGY_KEYWORDS)
    if wants_analysis and _contains_any(query, DEPOSIT_KEYWORDS):
        return RoutingDecision(
            type=QueryType.STRATEGY_COMPLEX,
            confidence=0.9,
            params=StrategyAction(action="deposit", amount=extract_amount(query)),
            agent_to_use=COORDINATOR_AGENT,
            reasoning_needed=True,
        )
    return _no_match(QueryType.STRATEGY_COMPLEX)


def parse_conversation(query: str) -> RoutingDecision:
    if match_conversational(query) is not None:
        return RoutingDecision(
            type=QueryType.CONVERSATION,
            confidence=0.9,
            should_bypass_agent=True,
        )
    return _no_match(QueryType.CONVERSATION)


UNKNOWN_DECISION = RoutingDecision(
    type=QueryType.UNKNOWN,
    confidence=0.3,
    agent_to_use=COORDINATOR_AGENT,
    reasoning_needed=True,
)

# (rule, cutoff) in descending specificity
ROUTING_RULES: List[Tuple[Callable[[str], RoutingDecision], float]] = [
    (parse_deposit, 0.8),
    (parse_withdraw, 0.8),
    (parse_portfolio, 0.8),
    (parse_research, 0.7),
    (parse_complex_strategy, 0.6),
    (parse_conversation, 0.0),
]


def normalize_query(query: str) -> str:
    return query.strip().lower()


def classify(query: str) -> RoutingDecision:
    """Classify a chat query into a routing decision."""
    normalized = normalize_query(query)

    for rule, cutoff in ROUTING_RULES:
        decision = rule(normalized)
        if decision.confidence > cutoff:
            return decision

    return UNKNOWN_DECISION
