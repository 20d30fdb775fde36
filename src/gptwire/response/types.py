"""Response schemas for the individual API endpoints.

Each class is a flat declaration of name -> key path -> wrapper on top of
:class:`~gptwire.response.payload.PayloadView`.
"""

from __future__ import annotations

from gptwire.response.payload import PayloadView, field, optional_field


class Usage(PayloadView):
    prompt_tokens = field()
    completion_tokens = field()
    total_tokens = field()


class Completion(PayloadView):
    class Choice(PayloadView):
        text = field()
        index = field()
        logprobs = field()
        finish_reason = field()

    id = field()
    object = field()
    created = field()
    model = field()
    choices = field(wrapper=Choice)
    usage = optional_field(wrapper=Usage)


class ChatCompletion(PayloadView):
    class Choice(PayloadView):
        class Message(PayloadView):
            role = field()
            content = field()

        index = field()
        message = field(wrapper=Message)
        finish_reason = field()

    id = field()
    object = field()
    created = field()
    choices = field(wrapper=Choice)
    usage = field(wrapper=Usage)

    def response(self) -> ChatCompletion.Choice.Message:
        """The message of the first choice."""
        return self.choices[0].message

    def response_text(self) -> str:
        return self.response().content


class ChatCompletionChunk(PayloadView):
    """A single streamed delta of a chat completion."""

    class Delta(PayloadView):
        role = optional_field()
        _content = optional_field("content")

        @property
        def content(self) -> str:
            return self._content or ""

    class Choice(PayloadView):
        delta = field(wrapper=lambda value: ChatCompletionChunk.Delta(value))
        index = field()
        finish_reason = optional_field()

    id = field()
    object = field()
    created = field()
    model = field()
    choices = field(wrapper=Choice)

    def response(self) -> ChatCompletionChunk.Delta:
        return self.choices[0].delta

    def response_text(self) -> str:
        return self.response().content


class Embedding(PayloadView):
    class EmbeddingData(PayloadView):
        object = field()
        embedding = field()
        index = field()

    class Usage(PayloadView):
        prompt_tokens = field()
        total_tokens = field()

    object = field()
    data = field(wrapper=EmbeddingData)
    model = field()
    usage = field(wrapper=Usage)


class Model(PayloadView):
    id = field()
    object = field()
    owned_by = field()
    permission = optional_field()


class ListModel(PayloadView):
    data = field(wrapper=Model)


class Moderation(PayloadView):
    class Category(PayloadView):
        hate = field()
        hate_threatening = field("hate/threatening")
        self_harm = field("self-harm")
        sexual = field()
        sexual_minors = field("sexual/minors")
        violence = field()
        violence_graphic = field("violence/graphic")

    class CategoryScore(Category):
        pass

    class Result(PayloadView):
        categories = field(wrapper=lambda value: Moderation.Category(value))
        category_scores = field(wrapper=lambda value: Moderation.CategoryScore(value))
        flagged = field()

    id = field()
    model = field()
    results = field(wrapper=Result)


class Edit(PayloadView):
    class Choice(PayloadView):
        text = field()
        index = field()

    object = field()
    created = field()
    choices = field(wrapper=Choice)
    usage = field(wrapper=Usage)


class ImageData(PayloadView):
    url = optional_field()
    b64_json = optional_field()


class ImageGeneration(PayloadView):
    created = field()
    data = field(wrapper=ImageData)


class ImageEdit(ImageGeneration):
    pass


class ImageVariation(ImageGeneration):
    pass


class File(PayloadView):
    id = field()
    object = field()
    bytes = field()
    created_at = field()
    filename = field()
    purpose = field()
    deleted = optional_field()


class FileList(PayloadView):
    data = field(wrapper=File)
    object = field()


class FineTune(PayloadView):
    class Event(PayloadView):
        object = field()
        created_at = field()
        level = field()
        message = field()

    class Hyperparams(PayloadView):
        batch_size = field()
        learning_rate_multiplier = field()
        n_epochs = field()
        prompt_loss_weight = field()

    id = field()
    object = field()
    model = field()
    created_at = field()
    events = optional_field(wrapper=Event)
    fine_tuned_model = field()
    hyperparams = field(wrapper=Hyperparams)
    organization_id = field()
    result_files = field(wrapper=File)
    status = field()
    validation_files = field(wrapper=File)
    training_files = field(wrapper=File)
    updated_at = field()


class FineTuneList(PayloadView):
    object = field()
    data = field(wrapper=FineTune)


class FineTuneEventList(PayloadView):
    data = field(wrapper=FineTune.Event)
    object = field()


class Transcription(PayloadView):
    text = field()
    language = optional_field()
