import uvicorn

from credit_analyzer.api.app import create_app
from credit_analyzer.config.settings import Settings
from credit_analyzer.logging.logger import Log


def main() -> None:
    """Entry point: load settings -> build application (logging, processor) -> serve HTTP."""
    settings = Settings()
    app = create_app(settings)
    Log.info(f"Server starting on port {settings.port}, Ollama at {settings.ollama_base_url}")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
