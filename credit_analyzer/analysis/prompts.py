from credit_analyzer.documents.models import DocumentType

BASE_INSTRUCTION = "Analyze this financial document and extract key information. Focus on:"

DOCUMENT_FOCUSES: dict[DocumentType, tuple[str, ...]] = {
    DocumentType.LEGAL: (
        "Company name and legal structure",
        "Business registration details",
        "Legal compliance status",
        "Any legal issues or pending litigation",
        "Ownership structure",
        "Business licenses and permits",
    ),
    DocumentType.PROFIT_LOSS: (
        "Revenue figures and trends",
        "Operating expenses breakdown",
        "Net profit/loss amounts",
        "Gross margin calculations",
        "Operating margin",
        "Period covered",
        "Year-over-year comparisons",
        "Key financial ratios",
    ),
    DocumentType.BALANCE_SHEET: (
        "Total assets and breakdown",
        "Current assets vs fixed assets",
        "Total liabilities and breakdown",
        "Current liabilities vs long-term debt",
        "Shareholders' equity",
        "Working capital",
        "Debt-to-equity ratio",
        "Asset turnover ratios",
    ),
    DocumentType.BANK_STATEMENT: (
        "Account balance trends",
        "Cash flow patterns",
        "Regular income sources",
        "Major expenses and payments",
        "Overdrafts or negative balances",
        "Transaction frequency",
        "Average monthly balance",
        "Seasonal variations",
    ),
    DocumentType.OTHER: (
        "Document type and purpose",
        "Key financial figures",
        "Important dates and periods",
        "Relevant business information",
        "Any red flags or concerns",
        "Positive indicators",
    ),
}


def build_document_prompt(document_type: DocumentType) -> str:
    """Instruction sent with every page of a document of the given type."""
    focuses = DOCUMENT_FOCUSES.get(document_type, DOCUMENT_FOCUSES[DocumentType.OTHER])
    return "\n".join([BASE_INSTRUCTION, *(f"- {focus}" for focus in focuses)])
