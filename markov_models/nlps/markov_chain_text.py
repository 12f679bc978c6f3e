"""
Markov chain text generator.

Wraps a ``MarkovChainBase`` and a ``MarkovChainTextTool``: text is tokenized
into words, the chain trains on or continues the word sequence, and generated
words are joined back into text.

Example:
    >>> model = MarkovChainText(n=2)
    >>> model = model.train("the cat sat on the mat. the cat ran.")
    >>> model.generate_sentences("the", 1)  # doctest: +SKIP
    'the cat ran.'
"""

from markov_models.base_models.markov_chain_base import MarkovChainBase, NGRAM_ORDER_DEFAULT
from markov_models.nlps.text_tool import MarkovChainTextTool
from markov_utils.config.config_loader import load_config
from markov_utils.loggers.json_logger import configure_logger


class MarkovChainText:
    """Text front end for ``MarkovChainBase``; every bit of state lives in the wrapped chain."""

    def __init__(self, n=NGRAM_ORDER_DEFAULT, tool=None, chain=None, **chain_kwargs):
        """
        Args:
            n (int): N-gram order used when a new chain is built
            tool (optional): ``MarkovChainTextTool`` or an object with optional
                ``tokenize``, ``join`` and ``count_sentences`` callables
            chain (MarkovChainBase, optional): Existing chain to wrap
            **chain_kwargs: Passed to ``MarkovChainBase`` when ``chain`` is not given
                (``transitions``, ``persistence``, ``rng``, ``logger``)
        """
        self.chain = chain if chain is not None else MarkovChainBase(n, **chain_kwargs)
        self.tool = tool if isinstance(tool, MarkovChainTextTool) else MarkovChainTextTool(tool)

    @classmethod
    def from_config(cls, config=None, environment="development", **kwargs):
        """
        Build a generator from the YAML configuration.

        Args:
            config (dict, optional): Already loaded configuration; read with
                ``load_config(environment)`` when omitted
            environment (str): Environment whose configuration is loaded
            **kwargs: Passed to the constructor (``tool``, ``persistence``, ``rng``, ...)

        Returns:
            MarkovChainText: New generator
        """
        if config is None:
            config = load_config(environment)

        if "logger" not in kwargs:
            kwargs["logger"] = configure_logger("markov_chain", config.get("logging"))

        n = (config.get("markov_chain") or {}).get("n", NGRAM_ORDER_DEFAULT)
        return cls(n=n, **kwargs)

    @property
    def n(self):
        return self.chain.n

    def train(self, text):
        """
        Train on text.

        Args:
            text (str or list of str): Training text(s)

        Returns:
            MarkovChainText: self
        """
        self.chain.train(self.tool.tokenize(text))
        return self

    def generate(self, text, stop=1):
        """
        Continue text.

        Args:
            text (str or list of str): Text to continue
            stop (int or callable): Number of words to generate, or a predicate
                ``(generated_words, step_index) -> bool``; generation continues
                while it returns True

        Returns:
            str: The input text followed by the generated words
        """
        words = self.chain.generate(self.tool.tokenize(text), stop)
        return self.tool.join(words)

    def generate_sentences(self, text, num_sentences=1):
        """
        Continue text until ``num_sentences`` sentences have been generated.

        Only words produced by the chain are counted, so a seed that already
        ends a sentence does not stop generation. A dead end stops earlier.

        Args:
            text (str or list of str): Text to continue
            num_sentences (int): Number of sentences to generate

        Returns:
            str: The input text followed by the generated words
        """
        seed = self.tool.tokenize(text)
        seed_length = len(seed)

        def stop_condition(generated_words, _):
            return self.tool.count_sentences(generated_words[seed_length:]) < num_sentences

        return self.tool.join(self.chain.generate(seed, stop_condition))

    def to_portable(self):
        return self.chain.to_portable()

    def from_portable(self, data):
        self.chain.from_portable(data)
        return self

    def to_json(self, **kwargs):
        return self.chain.to_json(**kwargs)

    def from_json(self, text):
        self.chain.from_json(text)
        return self

    async def save(self):
        return await self.chain.save()

    async def load(self):
        return await self.chain.load()
