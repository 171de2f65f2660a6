from .extract_stream import ExtractionPolicy, ExtractStreamUseCase, validate_target_url

__all__ = ["ExtractStreamUseCase", "ExtractionPolicy", "validate_target_url"]
