import pytest


class FakeLLM:
    """Completion client double replaying scripted texts or exceptions."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.prompts = []

    def generate_text(self, prompt):
        self.prompts.append(prompt)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def fake_llm():
    return FakeLLM
