"""
Prompt text for analyst insights: the conservative-analyst preamble, per-category
templates, the data-grounding loan summary and the static title table.
"""
from __future__ import annotations

from typing import Any, Optional

SYSTEM_CONTEXT = """You are a conservative banking analyst providing clear, non-technical, regulator-friendly analysis.
Base your analysis only on the provided loan data. Do not hallucinate or speculate.
Use professional banking terminology but explain concepts clearly for a broad audience."""

EXPLAIN_TEMPLATE = """Provide a comprehensive explanation of this loan for banking professionals. Structure your response with these sections:

Loan Data:
{loan_summary}

Provide:
1. Loan Overview: Summarize the key terms and structure
2. Current Status: Explain the current state of the loan
3. Performance Metrics: Interpret the health score and default probability
4. Key Considerations: Highlight important factors for bank management

Keep the tone professional and conservative. Be concise but thorough."""

RISK_TEMPLATE = """Provide a risk analysis of this loan for banking professionals. Structure your response with these sections:

Loan Data:
{loan_summary}

Risk Factors: {risk_factors}

Provide:
1. Risk Assessment: Evaluate the overall risk profile
2. Covenant Analysis: Analyze any covenant breaches and their implications
3. Default Probability: Interpret the 90-day default probability
4. Mitigation Strategies: Suggest conservative risk mitigation approaches as bullet points

Focus on concrete risk factors from the data. Avoid speculation."""

ESG_TEMPLATE = """Provide an ESG (Environmental, Social, Governance) impact assessment for this loan.

Loan Data:
{loan_summary}

Based on the borrower sector ({sector}) and available data, provide:
1. ESG Considerations: Relevant ESG factors for this sector
2. Performance Indicators: How operational metrics relate to ESG
3. Governance Assessment: Evaluate governance based on covenant compliance
4. ESG Risk Factors: Identify potential ESG-related risks

Be conservative and base analysis on sector norms and the provided data."""

SUMMARY_VOICE_TEMPLATE = """Based on the following loan analysis, generate a short, professional, executive-level summary suitable for text-to-speech.
The summary should be approximately 10-20 seconds when spoken (roughly 40-60 words).
Focus on high-level risk and performance. Do not read raw numbers, table data, or JSON keys.
Keep it calm and regulator-friendly.

Analysis:
{current_insight}

Loan Context:
{loan_summary}"""

INSIGHT_TITLES: dict[str, dict[str, str]] = {
    "explain": {
        "title": "Loan Explanation",
        "subtitle": "Comprehensive overview of loan structure and current status",
    },
    "risk": {
        "title": "Risk Analysis",
        "subtitle": "Detailed assessment of risk factors and mitigation strategies",
    },
    "esg": {
        "title": "ESG Impact Assessment",
        "subtitle": "Environmental, Social, and Governance considerations",
    },
    "summary-voice": {
        "title": "Executive Summary",
        "subtitle": "Professional summary suitable for text-to-speech",
    },
}

NOT_AVAILABLE = "N/A"


def _dig(record: Any, *path: str) -> Any:
    node = record
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def _fmt(value: Any) -> str:
    if value is None or value == "":
        return NOT_AVAILABLE
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _fmt_percent(probability: Any) -> str:
    if isinstance(probability, bool) or not isinstance(probability, (int, float)):
        return NOT_AVAILABLE
    return f"{probability * 100:.1f}%"


def _covenants(record: Any) -> list[dict[str, Any]]:
    covenants = _dig(record, "covenants")
    if not isinstance(covenants, list):
        return []
    return [c for c in covenants if isinstance(c, dict)]


def _describe_breach(covenant: dict[str, Any]) -> str:
    unit = covenant.get("unit") or ""
    suffix = f" {unit}" if unit else ""
    return (
        f"{_fmt(covenant.get('description'))} "
        f"(Current: {_fmt(covenant.get('current_value'))}{suffix}, "
        f"Threshold: {_fmt(covenant.get('threshold'))}{suffix})"
    )


def build_loan_summary(record: dict[str, Any]) -> str:
    """Grounding block placed under every insight prompt. Missing fields render as N/A."""
    covenants = _covenants(record)
    breached = [c for c in covenants if c.get("status") == "breached"]
    lines = [
        f"Loan ID: {_fmt(_dig(record, 'loan_id'))}",
        "Borrower: {name} ({sector}, {rating})".format(
            name=_fmt(_dig(record, "borrower", "name")),
            sector=_fmt(_dig(record, "borrower", "sector")),
            rating=_fmt(_dig(record, "borrower", "credit_rating")),
        ),
        "Principal: {amount} {currency}".format(
            amount=_fmt(_dig(record, "loan_terms", "principal", "amount")),
            currency=_fmt(_dig(record, "loan_terms", "principal", "currency")),
        ),
        "Interest Rate: {rate}% ({kind})".format(
            rate=_fmt(_dig(record, "loan_terms", "interest_rate", "current_all_in")),
            kind=_fmt(_dig(record, "loan_terms", "interest_rate", "type")),
        ),
        f"Maturity: {_fmt(_dig(record, 'loan_terms', 'maturity_date'))}",
        "Health Score: {score}/100 ({trend})".format(
            score=_fmt(_dig(record, "risk_engine", "health_score")),
            trend=_fmt(_dig(record, "risk_engine", "trend")),
        ),
        "Probability of Default (90d): "
        + _fmt_percent(_dig(record, "risk_engine", "prediction", "probability_of_default")),
        f"Covenants: {len(covenants)} total, {len(breached)} breached",
        "Covenant Breaches: " + ("; ".join(_describe_breach(c) for c in breached) or "None"),
    ]
    return "\n".join(lines)


def risk_factors(record: dict[str, Any]) -> str:
    factors = _dig(record, "risk_engine", "prediction", "factors")
    if not isinstance(factors, list) or not factors:
        return NOT_AVAILABLE
    return ", ".join(str(f) for f in factors)


def build_category_prompt(
    category: str,
    record: dict[str, Any],
    current_insight: Optional[str] = None,
) -> str:
    """Preamble + category template + grounding summary. category must already be validated."""
    loan_summary = build_loan_summary(record)
    if category == "explain":
        body = EXPLAIN_TEMPLATE.format(loan_summary=loan_summary)
    elif category == "risk":
        body = RISK_TEMPLATE.format(loan_summary=loan_summary, risk_factors=risk_factors(record))
    elif category == "esg":
        body = ESG_TEMPLATE.format(loan_summary=loan_summary, sector=_fmt(_dig(record, "borrower", "sector")))
    else:
        body = SUMMARY_VOICE_TEMPLATE.format(current_insight=current_insight or "", loan_summary=loan_summary)
    return f"{SYSTEM_CONTEXT}\n\n{body}"
