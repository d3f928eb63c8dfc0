from pathlib import Path

from credit_analyzer.inference.exceptions import ModelGatewayError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"


def load_prompt_template(path: Path | None = None) -> str:
    """Load the credit report prompt template from a file.

    Args:
        path: Path to the prompt template file.
              Defaults to the bundled credit_report_prompt.txt.

    Returns:
        The raw template string with ``{document_types}`` and
        ``{extracted_data}`` placeholders.

    Raises:
        ModelGatewayError: if the file cannot be read.
    """
    if path is None:
        path = _DEFAULT_PROMPT_DIR / "credit_report_prompt.txt"
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ModelGatewayError(f"Failed to load prompt template: {exc}") from exc
