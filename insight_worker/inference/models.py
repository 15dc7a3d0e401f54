from dataclasses import dataclass


@dataclass(frozen=True)
class MediaAttachment:
    """Auxiliary media sent alongside the text prompt."""

    data_base64: str
    mime_type: str = "image/jpeg"

    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data_base64}"


@dataclass(frozen=True)
class PromptPayload:
    """One self-contained request to the inference service."""

    user_prompt: str
    system_prompt: str = ""
    attachment: MediaAttachment | None = None
    model: str = ""
    temperature: float = 0.7
    max_tokens: int = 2000
