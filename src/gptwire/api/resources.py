"""Endpoint resources.

Each resource builds a route and a body, hands them to the client (a
transport or a :class:`~gptwire.cache.ResponseCache`), and decodes the
returned text into the matching response type.  Streaming variants push
decoded chunks to a caller-supplied callback instead of returning.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Optional, Union

from gptwire.client.multipart import FormFile
from gptwire.client.streaming import FrameDecoder
from gptwire.exceptions import InvalidUsageError
from gptwire.response import types as schema
from gptwire.response.payload import PayloadView

OnChunk = Callable[[Any], object]


def _check_streaming(stream: bool, on_chunk: Optional[OnChunk]) -> None:
    if stream and on_chunk is None:
        raise InvalidUsageError("Streaming responses require a callback")
    if not stream and on_chunk is not None:
        raise InvalidUsageError("Non-streaming responses do not support callbacks")


class Resource:
    """Base class for endpoint groups; holds the client all calls go through."""

    def __init__(self, client: Any) -> None:
        self._client = client

    def _get(self, route: str) -> str:
        return self._client.get(route)

    def _post(self, route: str, body: Optional[dict[str, Any]] = None) -> str:
        return self._client.post(route, body or {})

    def _post_form_multipart(self, route: str, body: dict[str, Any]) -> str:
        return self._client.post_form_multipart(route, body)

    def _stream(
        self,
        route: str,
        body: dict[str, Any],
        payload_cls: type[PayloadView],
        on_chunk: OnChunk,
    ) -> None:
        decoder = FrameDecoder(payload_cls)
        self._client.stream_post(route, body, decoder.callback(on_chunk))

    @staticmethod
    def _form_file(path: Union[str, Path]) -> FormFile:
        return FormFile(path)


class Completions(Resource):
    def create(
        self,
        model: str,
        stream: bool = False,
        on_chunk: Optional[OnChunk] = None,
        **kwargs: Any,
    ) -> Optional[schema.Completion]:
        """Create a text completion.

        With ``stream=True`` every streamed :class:`~gptwire.response.types.Completion`
        is passed to *on_chunk* as it arrives and ``None`` is returned.
        """
        _check_streaming(stream, on_chunk)
        body = {"model": model, **kwargs}
        if stream:
            assert on_chunk is not None
            self._stream("/v1/completions", {**body, "stream": True}, schema.Completion, on_chunk)
            return None
        return schema.Completion.from_json(self._post("/v1/completions", body))


class ChatCompletions(Resource):
    def create(
        self,
        model: str,
        messages: list[dict[str, Any]],
        stream: bool = False,
        on_chunk: Optional[OnChunk] = None,
        **kwargs: Any,
    ) -> Optional[schema.ChatCompletion]:
        """Create a chat completion.

        With ``stream=True`` each :class:`~gptwire.response.types.ChatCompletionChunk`
        is passed to *on_chunk* as it arrives and ``None`` is returned.
        """
        _check_streaming(stream, on_chunk)
        body = {"model": model, "messages": messages, **kwargs}
        if stream:
            assert on_chunk is not None
            self._stream(
                "/v1/chat/completions",
                {**body, "stream": True},
                schema.ChatCompletionChunk,
                on_chunk,
            )
            return None
        return schema.ChatCompletion.from_json(self._post("/v1/chat/completions", body))


class Embeddings(Resource):
    def create(self, model: str, input: Any, **kwargs: Any) -> schema.Embedding:
        return schema.Embedding.from_json(
            self._post("/v1/embeddings", {"model": model, "input": input, **kwargs})
        )


class Models(Resource):
    def list(self) -> schema.ListModel:
        return schema.ListModel.from_json(self._get("/v1/models"))

    def fetch(self, model_id: str) -> schema.Model:
        return schema.Model.from_json(self._get(f"/v1/models/{model_id}"))


class Moderations(Resource):
    def create(self, input: Any, model: str) -> schema.Moderation:
        return schema.Moderation.from_json(
            self._post("/v1/moderations", {"input": input, "model": model})
        )


class Edits(Resource):
    def create(self, model: str, instruction: str, **kwargs: Any) -> schema.Edit:
        return schema.Edit.from_json(
            self._post("/v1/edits", {"model": model, "instruction": instruction, **kwargs})
        )


class Files(Resource):
    def create(self, file: Union[str, Path], purpose: str) -> schema.File:
        return schema.File.from_json(
            self._post_form_multipart(
                "/v1/files", {"file": self._form_file(file), "purpose": purpose},
            )
        )

    def list(self) -> schema.FileList:
        return schema.FileList.from_json(self._get("/v1/files"))

    def fetch(self, file_id: str) -> schema.File:
        return schema.File.from_json(self._get(f"/v1/files/{file_id}"))

    def delete(self, file_id: str) -> schema.File:
        return schema.File.from_json(self._client.delete(f"/v1/files/{file_id}"))

    def get_content(self, file_id: str) -> str:
        """Raw file content; not JSON, so returned as text."""
        return self._get(f"/v1/files/{file_id}/content")


class FineTunes(Resource):
    def list(self) -> schema.FineTuneList:
        return schema.FineTuneList.from_json(self._get("/v1/fine-tunes"))

    def create(self, training_file: str, **kwargs: Any) -> schema.FineTune:
        return schema.FineTune.from_json(
            self._post("/v1/fine-tunes", {"training_file": training_file, **kwargs})
        )

    def fetch(self, fine_tune_id: str) -> schema.FineTune:
        return schema.FineTune.from_json(self._get(f"/v1/fine-tunes/{fine_tune_id}"))

    def cancel(self, fine_tune_id: str) -> schema.FineTune:
        return schema.FineTune.from_json(self._post(f"/v1/fine-tunes/{fine_tune_id}/cancel"))

    def list_events(self, fine_tune_id: str) -> schema.FineTuneEventList:
        return schema.FineTuneEventList.from_json(
            self._get(f"/v1/fine-tunes/{fine_tune_id}/events")
        )


class Images(Resource):
    def create(self, prompt: str, **kwargs: Any) -> schema.ImageGeneration:
        return schema.ImageGeneration.from_json(
            self._post("/v1/images/generations", {"prompt": prompt, **kwargs})
        )

    def create_variation(self, image: Union[str, Path], **kwargs: Any) -> schema.ImageVariation:
        return schema.ImageVariation.from_json(
            self._post_form_multipart(
                "/v1/images/variations", {"image": self._form_file(image), **kwargs},
            )
        )

    def edit(
        self,
        image: Union[str, Path],
        prompt: str,
        mask: Optional[Union[str, Path]] = None,
        **kwargs: Any,
    ) -> schema.ImageEdit:
        body: dict[str, Any] = {"image": self._form_file(image), "prompt": prompt, **kwargs}
        if mask is not None:
            body["mask"] = self._form_file(mask)
        return schema.ImageEdit.from_json(self._post_form_multipart("/v1/images/edits", body))


class Audio(Resource):
    def transcribe(self, file: Union[str, Path], model: str, **kwargs: Any) -> schema.Transcription:
        return schema.Transcription.from_json(
            self._post_form_multipart(
                "/v1/audio/transcriptions",
                {"file": self._form_file(file), "model": model, **kwargs},
            )
        )

    def translate(self, file: Union[str, Path], model: str, **kwargs: Any) -> schema.Transcription:
        return schema.Transcription.from_json(
            self._post_form_multipart(
                "/v1/audio/translations",
                {"file": self._form_file(file), "model": model, **kwargs},
            )
        )
