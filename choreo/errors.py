"""Structural failures raised by the extraction and decoding stages."""


class ChoreoError(Exception):
    pass


class PayloadExtractionError(ChoreoError):
    """No balanced JSON object could be isolated from the model text."""


class SceneDecodeError(ChoreoError):
    def __init__(self, message: str, detected_format: str = "unknown") -> None:
        super().__init__(message)
        self.detected_format = detected_format
