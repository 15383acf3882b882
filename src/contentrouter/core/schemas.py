"""Schemas for remote documents consumed by the coordinator."""

from pydantic import BaseModel


class RemoteContentDocument(BaseModel):
    """JSON document served by the remote-document content source.

    Only ``url`` is required; any other keys in the payload are ignored.
    """

    url: str
