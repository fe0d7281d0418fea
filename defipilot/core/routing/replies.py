"""Deterministic answers for queries the router lets bypass the agent."""

from typing import Dict

from ...types import DirectResponse, QueryType, RoutingDecision
from ..execution import build_transaction_params
from .router import DEFAULT_STRATEGY, match_conversational, normalize_query

QUICK_REPLIES: Dict[str, str] = {
    "hello": (
        "👋 Hello! I can help you deposit funds into DeFi protocols. "
        'Try saying "Deposit 100 USDC to Morpho"'
    ),
    "hi": "👋 Hi! Ready to help you with DeFi strategies. What would you like to do?",
    "hey": "👋 Hey there! Ask me about yields or deposit funds.",
    "thanks": "😊 You're welcome! Let me know if you need anything else.",
    "help": (
        "🤖 I can help you:\n"
        "• Deposit funds to DeFi protocols\n"
        "• Check yields and protocols\n"
        "• View your portfolio\n\n"
        'Try: "Deposit 50 USDC to Morpho"'
    ),
}

DEFAULT_QUICK_REPLY_KEY = "hello"

PORTFOLIO_REPLY = 'Click the "📊 Portfolio" button at the top to view your positions.'

NEED_MORE_INFO_REPLY = "I need more information to help you with that."


def quick_reply(query: str) -> str:
    phrase = match_conversational(normalize_query(query))
    return QUICK_REPLIES.get(phrase or DEFAULT_QUICK_REPLY_KEY, QUICK_REPLIES[DEFAULT_QUICK_REPLY_KEY])


def build_direct_response(decision: RoutingDecision, query: str) -> DirectResponse:
    """Answer a bypassed decision without the agent.

    Raises:
        TransactionBuildError: the decision carries an amount the builder rejects
    """
    params = decision.params

    if decision.type == QueryType.SIMPLE_DEPOSIT and params and params.amount and params.protocol:
        strategy = params.strategy or DEFAULT_STRATEGY
        transactions = build_transaction_params(params.model_copy(update={"strategy": strategy}))
        return DirectResponse(
            response=(
                f"Ready to deposit {params.amount} USDC to {params.protocol}.\n\n"
                "Transaction steps:\n"
                f"1. Approve {params.amount} USDC for vault\n"
                f"2. Deposit to {params.protocol} {strategy} strategy\n\n"
                "Would you like to proceed with execution?"
            ),
            transactions=transactions,
            requires_approval=True,
        )

    if decision.type == QueryType.SIMPLE_WITHDRAW and params and params.position_id is not None:
        transactions = build_transaction_params(params)
        return DirectResponse(
            response=(
                f"Ready to withdraw from position {params.position_id}.\n\n"
                "Would you like to proceed with execution?"
            ),
            transactions=transactions,
            requires_approval=True,
        )

    if decision.type == QueryType.PORTFOLIO_CHECK:
        return DirectResponse(response=PORTFOLIO_REPLY)

    if decision.type == QueryType.CONVERSATION:
        return DirectResponse(response=quick_reply(query))

    return DirectResponse(response=NEED_MORE_INFO_REPLY)
