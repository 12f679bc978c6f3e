import pytest
from types import SimpleNamespace

from markov_models.nlps.text_tool import MarkovChainTextTool, default_tokenize


@pytest.fixture
def text_tool():
    """Fixture to initialize a MarkovChainTextTool with default behaviour."""
    return MarkovChainTextTool()


def test_tokenize_whitespace(text_tool):
    assert text_tool.tokenize("the cat  sat") == ["the", "cat", "sat"]
    assert text_tool.tokenize("the\tcat\nsat\r\non") == ["the", "cat", "sat", "on"]

    # Leading and trailing whitespace does not produce empty tokens
    assert text_tool.tokenize("  Hello world.\n") == ["Hello", "world."]


def test_tokenize_empty_text(text_tool):
    assert text_tool.tokenize("") == []
    assert text_tool.tokenize(" \n\t ") == []


def test_tokenize_list_of_texts(text_tool):
    assert text_tool.tokenize(["the cat", "sat on", "", "the mat"]) == [
        "the", "cat", "sat", "on", "the", "mat"
    ]


def test_tokenize_keeps_punctuation(text_tool):
    assert text_tool.tokenize("Hello, world!") == ["Hello,", "world!"]


def test_join(text_tool):
    assert text_tool.join(["the", "cat", "sat"]) == "the cat sat"
    assert text_tool.join(("a", "b")) == "a b"
    assert text_tool.join([]) == ""


def test_join_passes_text_through(text_tool):
    assert text_tool.join("already joined") == "already joined"


def test_count_sentences(text_tool):
    assert text_tool.count_sentences(["Hello", "world.", "Hi", "again."]) == 2
    assert text_tool.count_sentences("One. Two three. Four") == 2
    assert text_tool.count_sentences("no sentence end") == 0
    assert text_tool.count_sentences([]) == 0


def test_custom_tokenizer_replaces_default():
    tool = MarkovChainTextTool(tokenize=list)
    assert tool.tokenize("abc") == ["a", "b", "c"]
    # Applied to every element of a list
    assert tool.tokenize(["ab", "c"]) == ["a", "b", "c"]


def test_custom_joiner_replaces_default():
    tool = MarkovChainTextTool(join="".join)
    assert tool.join(["a", "b", "c"]) == "abc"
    assert tool.join("abc") == "abc"


def test_custom_counter_receives_tokens(mocker):
    counter = mocker.Mock(return_value=7)
    tool = MarkovChainTextTool(count_sentences=counter)

    assert tool.count_sentences("a b. c") == 7
    counter.assert_called_once_with(["a", "b.", "c"])


def test_tool_object_supplies_operations():
    tool = MarkovChainTextTool(SimpleNamespace(
        tokenize=lambda text: text.split(","),
        join=",".join,
    ))

    assert tool.tokenize("a,b,c") == ["a", "b", "c"]
    assert tool.join(["a", "b"]) == "a,b"
    # Counter falls back to the default, on tokens from the custom tokenizer
    assert tool.count_sentences("a.,b,c.") == 2


def test_tool_object_non_callable_attributes_are_ignored():
    tool = MarkovChainTextTool(SimpleNamespace(tokenize=None, join="not callable"))
    assert tool.tokenize("a b") == ["a", "b"]
    assert tool.join(["a", "b"]) == "a b"


def test_keyword_overrides_tool_object():
    tool = MarkovChainTextTool(
        SimpleNamespace(join="-".join),
        join="+".join,
    )
    assert tool.join(["a", "b"]) == "a+b"


def test_default_tokenize_function():
    assert default_tokenize("one two\r\nthree") == ["one", "two", "three"]
