"""
Text tokenizer/joiner used by the Markov chain text generator.

Each of the three operations can be replaced by a caller supplied function.
A replacement takes over that operation completely; the defaults are:

- tokenize: split on runs of whitespace
- join: join tokens with a single space
- count_sentences: count tokens ending with a period
"""

import re

# Word separator shared by every default tokenizer
WORD_SEPARATOR = re.compile(r"(?:\s|\r?\n)+")


def default_tokenize(text):
    """
    Split text into words on runs of whitespace.

    Example:
        >>> default_tokenize("the cat\\n sat")
        ['the', 'cat', 'sat']
    """
    text = text.strip()
    if not text:
        return []
    return WORD_SEPARATOR.split(text)


def default_join(tokens):
    return " ".join(tokens)


def default_count_sentences(tokens):
    return sum(1 for token in tokens if token.endswith("."))


def _is_sequence(value):
    return isinstance(value, (list, tuple))


class MarkovChainTextTool:
    """
    Tokenizer, joiner and sentence counter for the text generator.

    Custom behaviour comes either from an object exposing any of ``tokenize``,
    ``join`` and ``count_sentences``, or from the keyword arguments of the same
    names (keywords win over the object's attributes).
    """

    def __init__(self, tool=None, tokenize=None, join=None, count_sentences=None):
        """
        Args:
            tool (optional): Object with optional ``tokenize``, ``join`` and
                ``count_sentences`` callables
            tokenize (callable, optional): ``text -> list of str``
            join (callable, optional): ``tokens -> str``
            count_sentences (callable, optional): ``tokens -> int``
        """
        self._tokenize = tokenize or self._from_tool(tool, "tokenize")
        self._join = join or self._from_tool(tool, "join")
        self._count_sentences = count_sentences or self._from_tool(
            tool, "count_sentences")

    @staticmethod
    def _from_tool(tool, name):
        func = getattr(tool, name, None)
        return func if callable(func) else None

    def tokenize(self, text):
        """
        Split text into tokens.

        Args:
            text (str or list of str): Text, or several texts tokenized in order
                and concatenated

        Returns:
            list of str: Tokens
        """
        if _is_sequence(text):
            tokens = []
            for item in text:
                tokens.extend(self.tokenize(item))
            return tokens

        if self._tokenize is not None:
            return list(self._tokenize(text))
        return default_tokenize(text)

    def join(self, tokens):
        """
        Join tokens into text.

        Anything that is not a list/tuple is taken as already joined text and
        returned unchanged.
        """
        if not _is_sequence(tokens):
            return tokens
        if self._join is not None:
            return self._join(tokens)
        return default_join(tokens)

    def count_sentences(self, tokens):
        """
        Count sentences in tokens (or in text, which is tokenized first).

        Returns:
            int: Number of sentences
        """
        tokens = self.tokenize(tokens)
        if self._count_sentences is not None:
            return self._count_sentences(tokens)
        return default_count_sentences(tokens)
