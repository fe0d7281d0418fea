"""
Tests for the rule-based query router and direct replies.
"""

import pytest

from defipilot.core.routing import build_direct_response, classify, quick_reply
from defipilot.core.routing.replies import NEED_MORE_INFO_REPLY, PORTFOLIO_REPLY, QUICK_REPLIES
from defipilot.core.routing.router import UNKNOWN_DECISION
from defipilot.types import QueryType


class TestDepositRouting:

    def test_amount_and_protocol_bypasses_agent(self):
        decision = classify("deposit 100 usdc to morpho")

        assert decision.type == QueryType.SIMPLE_DEPOSIT
        assert decision.confidence == 0.95
        assert decision.should_bypass_agent is True
        assert decision.params.action == "deposit"
        assert decision.params.amount == "100"
        assert decision.params.protocol == "Morpho"
        assert decision.params.strategy == "Lending"

    def test_amount_without_protocol_defaults_to_morpho(self):
        decision = classify("Deposit 250 USDC")

        assert decision.type == QueryType.SIMPLE_DEPOSIT
        assert decision.confidence == 0.85
        assert decision.should_bypass_agent is True
        assert decision.params.protocol == "Morpho"
        assert decision.params.amount == "250"

    def test_protocol_name_is_capitalized(self):
        decision = classify("stake 10 usdc in aave")

        assert decision.params.protocol == "Aave"

    def test_decimal_amount_is_extracted(self):
        decision = classify("deposit 12.5 usdc to morpho")

        assert decision.params.amount == "12.5"

    def test_research_and_deposit_routes_to_coordinator(self):
        decision = classify("research and deposit 50 usdc to the safest protocol")

        assert decision.type == QueryType.STRATEGY_COMPLEX
        assert decision.confidence == 0.9
        assert decision.should_bypass_agent is False
        assert decision.agent_to_use == "coordinator"
        assert decision.params.action == "deposit"
        assert decision.params.amount == "50"

    def test_deposit_without_amount_is_not_bypassed(self):
        decision = classify("deposit into morpho")

        assert decision.should_bypass_agent is False
        assert decision.type == QueryType.UNKNOWN


class TestWithdrawRouting:

    @pytest.mark.parametrize("query,position", [
        ("withdraw from position 3", 3),
        ("withdraw position #7", 7),
        ("unstake id 12", 12),
    ])
    def test_position_id_bypasses_agent(self, query, position):
        decision = classify(query)

        assert decision.type == QueryType.SIMPLE_WITHDRAW
        assert decision.confidence == 0.95
        assert decision.should_bypass_agent is True
        assert decision.params.action == "withdraw"
        assert decision.params.position_id == position

    def test_withdraw_everything_does_not_clear_cutoff(self):
        # 0.8 is not strictly above the 0.8 cutoff
        decision = classify("withdraw everything")

        assert decision.type == QueryType.UNKNOWN
        assert decision.should_bypass_agent is False


class TestOtherRouting:

    def test_portfolio_bypasses_agent(self):
        decision = classify("show my portfolio")

        assert decision.type == QueryType.PORTFOLIO_CHECK
        assert decision.should_bypass_agent is True

    def test_research_only(self):
        decision = classify("what are the top protocols on base")

        assert decision.type == QueryType.RESEARCH_SIMPLE
        assert decision.confidence == 0.9
        assert decision.should_bypass_agent is False
        assert decision.agent_to_use == "coordinator"

    def test_strategy_verb_with_deposit_is_complex(self):
        decision = classify("recommend where to invest my savings")

        assert decision.type == QueryType.STRATEGY_COMPLEX
        assert decision.params.amount is None

    @pytest.mark.parametrize("query", ["hello", "hi there", "thanks", "  HELP  "])
    def test_conversation_bypasses_agent(self, query):
        decision = classify(query)

        assert decision.type == QueryType.CONVERSATION
        assert decision.should_bypass_agent is True

    def test_unrecognized_query_falls_through_to_unknown(self):
        decision = classify("tell me a joke about the weather")

        assert decision == UNKNOWN_DECISION
        assert decision.confidence == 0.3
        assert decision.agent_to_use == "coordinator"

    def test_classification_is_deterministic(self):
        assert classify("deposit 100 usdc to morpho") == classify("  Deposit 100 USDC to Morpho ")

    def test_decision_serializes_with_wire_names(self):
        payload = classify("withdraw from position 3").model_dump(by_alias=True, exclude_none=True)

        assert payload["shouldBypassAgent"] is True
        assert payload["params"]["positionId"] == 3


class TestDirectResponses:

    def test_deposit_reply_builds_approve_and_deposit(self):
        query = "deposit 100 usdc to morpho"
        direct = build_direct_response(classify(query), query)

        assert direct.requires_approval is True
        assert len(direct.transactions) == 2
        assert direct.transactions[0].description == "Approve 100 USDC for vault"
        assert "Ready to deposit 100 USDC to Morpho" in direct.response

    def test_withdraw_reply_builds_single_transaction(self):
        query = "withdraw from position 3"
        direct = build_direct_response(classify(query), query)

        assert direct.requires_approval is True
        assert [tx.description for tx in direct.transactions] == ["Withdraw from position 3"]

    def test_portfolio_reply_has_no_transactions(self):
        direct = build_direct_response(classify("show my portfolio"), "show my portfolio")

        assert direct.response == PORTFOLIO_REPLY
        assert direct.transactions is None
        assert direct.requires_approval is False

    def test_quick_reply_keyed_by_matched_phrase(self):
        assert quick_reply("thanks a lot") == QUICK_REPLIES["thanks"]
        assert quick_reply("help") == QUICK_REPLIES["help"]

    def test_quick_reply_falls_back_to_greeting(self):
        assert quick_reply("goodbye") == QUICK_REPLIES["hello"]

    def test_non_bypass_decision_gets_generic_reply(self):
        direct = build_direct_response(UNKNOWN_DECISION, "anything")

        assert direct.response == NEED_MORE_INFO_REPLY
