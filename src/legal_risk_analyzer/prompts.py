"""
Prompt templates for LLM-backed risk analysis.
"""

from __future__ import annotations

SYSTEM_PROMPT = """You are a senior legal risk analyst reviewing contracts, policies and other
legal documents for business clients. You score risk conservatively and explain it in
plain English.

Key principles:
- Base every finding on language that is actually present in the document
- Reserve extreme scores for genuinely dangerous terms
- Quote amounts, percentages and deadlines exactly as written
- Respond with a single JSON object and nothing else
"""

ANALYSIS_PROMPT = """Analyze this legal document comprehensively. Return a JSON object with
the following EXACT structure (respond ONLY with valid JSON):

{{
    "summary": "Brief 2-3 sentence summary of the document",
    "overall_risk_score": 20,
    "risk_confidence": 60,
    "document_type": "e.g. Service Agreement, Employment Contract, NDA",
    "industry_context": "e.g. Technology, Healthcare, Finance",
    "risk_breakdown": {{
        "financial_risk": 1,
        "legal_risk": 1,
        "operational_risk": 1,
        "compliance_risk": 1,
        "reputational_risk": 1
    }},
    "key_findings": ["finding", "finding", "finding"],
    "recommendations": ["recommendation", "recommendation", "recommendation"],
    "critical_issues": [
        {{
            "issue": "Issue title",
            "severity": "critical|high|medium|low",
            "urgency": "high|medium|low",
            "impact": "Detailed description of the exposure",
            "recommendation": "Specific recommendation"
        }}
    ],
    "clauses": [
        {{
            "clause_id": "clause_1",
            "section": "Section name",
            "text": "Clause text (max 200 chars)",
            "risk_level": "low|medium|high",
            "risk_score": 1,
            "confidence": 60,
            "risk_explanation": "Why this clause is risky",
            "clause_type": "Type of clause",
            "key_terms": ["term"],
            "recommendations": ["recommendation"],
            "financial_impact": {{
                "amounts": ["$amount"],
                "impact_level": "low|medium|high"
            }}
        }}
    ],
    "financial_analysis": {{
        "total_value": "Total contract value",
        "payment_terms": ["term"],
        "penalties": [
            {{"trigger": "What triggers the penalty", "amount": "Amount", "type": "Kind of penalty"}}
        ],
        "liability_caps": ["cap"]
    }}
}}

Scoring ranges: overall_risk_score 20-95, risk_confidence 60-95, every risk_breakdown
value 1-10, clause risk_score 1-10.

Guidelines:
1. Analyze every clause and legal term
2. Identify specific financial amounts, percentages and payment terms
3. Assess liability exposure, indemnification and termination rights
4. Consider industry-specific compliance requirements
5. Give actionable recommendations

DOCUMENT:
{document_text}
"""


def build_analysis_prompt(text: str, max_chars: int = 6000) -> str:
    """Fill :data:`ANALYSIS_PROMPT`, truncating the document to *max_chars*.

    A truncated document is marked with a trailing ``...``.
    """
    excerpt = text[:max_chars]
    if len(text) > max_chars:
        excerpt += "..."
    return ANALYSIS_PROMPT.format(document_text=excerpt)
