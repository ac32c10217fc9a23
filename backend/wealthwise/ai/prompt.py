"""Prompt constants and helpers for the AI financial advisor."""

SYSTEM_PROMPT_BASE = """
You are an AI Financial Advisor with advanced expertise in personal finance, budgeting, investments, and financial planning.

Key guidelines:
- Provide practical, actionable financial advice
- Be concise but thorough in your responses
- Consider risk tolerance and personal circumstances
- Always prioritize financial safety and responsible practices
- Suggest diversification in investments
- Emphasize emergency funds and debt management
- Be encouraging and supportive in your tone

Respond professionally and helpfully to financial questions and concerns.
""".strip()

TRANSACTION_ADVICE_PROMPT = """
You are a concise personal finance coach. The user just recorded the transaction below.
Reply with one or two sentences of specific, practical advice about it.
Do not repeat the transaction details back verbatim.
""".strip()


def build_system_prompt(financial_context: str) -> str:
    """Attach the user's financial snapshot to the base advisor prompt."""
    if not financial_context:
        return SYSTEM_PROMPT_BASE

    return (
        f"{SYSTEM_PROMPT_BASE}\n\n"
        "The user's current financial data:\n"
        f"{financial_context}"
    )


def build_transaction_prompt(transaction_line: str, financial_context: str) -> str:
    return (
        f"{TRANSACTION_ADVICE_PROMPT}\n\n"
        f"Transaction: {transaction_line}\n\n"
        "The user's current financial data:\n"
        f"{financial_context}"
    )
