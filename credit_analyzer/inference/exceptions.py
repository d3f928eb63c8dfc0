class ModelGatewayError(Exception):
    """Base exception for all inference backend failures."""


class ConnectivityError(ModelGatewayError):
    """Raised when the inference backend cannot be reached."""


class InstallError(ModelGatewayError):
    """Raised when the model cannot be pulled or is missing after a pull."""


class InferenceFailure(ModelGatewayError):
    """Raised when a generation request fails after all attempts."""


class MalformedReportError(ModelGatewayError):
    """Raised when the report response is not a usable JSON assessment."""
