from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class EndpointInput(BaseModel):
    """
    Raw, user-supplied description of the remote upstream. Every field is optional
    and ``host`` may carry a complete URL.
    """

    model_config = ConfigDict(frozen=True)

    protocol: Optional[str] = None
    host: Optional[str] = None
    port: Optional[Union[int, str]] = None
    base_path: Optional[str] = None


class ResolvedEndpoint(BaseModel):
    """
    Canonical upstream endpoint. Always fully populated.
    """

    model_config = ConfigDict(frozen=True)

    protocol: str
    host: str
    port: int = Field(gt=0, lt=65536)
    base_path: str = "/"

    @property
    def url(self) -> str:
        base_path = "" if self.base_path == "/" else self.base_path
        return f"{self.protocol}://{self.host}:{self.port}{base_path}"

    def __repr__(self):
        return (
            f"ResolvedEndpoint(protocol={self.protocol}, host={self.host}, "
            f"port={self.port}, base_path={self.base_path})"
        )
