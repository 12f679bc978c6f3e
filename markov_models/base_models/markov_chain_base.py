"""
Generic n-gram Markov chain over string states.

The chain counts how often each state follows a context of ``n - 1`` states and
generates new sequences by weighted random sampling over those counts. It knows
nothing about text: tokenizing and joining belong to the text adapter in
``markov_models.nlps``.

Portable format (JSON compatible)::

    {
        "type": "markov-chain-base",
        "n": 2,
        "transitions": {"the": [["cat", 2]], "cat": [["sat", 1], ["ran", 1]]}
    }

Context keys are the context states joined by a single space; an order 1
chain stores everything under the empty key.
"""

import inspect
import json
import logging
import random

from markov_utils.loggers.json_logger import get_logger, log_json

MARKOV_CHAIN_BASE_TYPE = "markov-chain-base"
NGRAM_ORDER_DEFAULT = 2
STATE_SEPARATOR = " "


class MarkovChainError(Exception):
    """Base class for errors raised by the Markov chain models."""


class InsufficientContextError(MarkovChainError, ValueError):
    """Generation was asked to continue from fewer states than the order needs."""

    def __init__(self, required, actual):
        self.required = required
        self.actual = actual
        super().__init__(f"need {required} or more states, but got {actual}")


class NoPersistenceConfiguredError(MarkovChainError, RuntimeError):
    """save() or load() was called on a chain built without a persistence strategy."""

    def __init__(self, operation):
        self.operation = operation
        super().__init__(f"cannot {operation}: persistence not configured")


class InvalidTransitionsError(MarkovChainError, ValueError):
    """A transition table carried a count that is not a positive integer."""


def _last_states(states, count):
    # states[-0:] would return everything, so order 1 needs the explicit branch
    if count <= 0:
        return []
    return list(states[-count:])


class MarkovChainBase:
    """
    N-gram Markov chain over opaque string states.

    The transition table is owned by the instance: it is changed only by
    ``train``, ``set_transitions`` and ``from_portable``, and read through
    ``get_transition``, ``contexts`` and ``to_portable``. Nothing here is
    synchronized; concurrent ``train`` calls on one instance may lose counts.
    """

    def __init__(self, n=NGRAM_ORDER_DEFAULT, transitions=None, persistence=None,
                 rng=None, logger=None):
        """
        Args:
            n (int): N-gram order, coerced to at least 1 (falsy values mean the default, 2)
            transitions (dict, optional): Initial table, loaded with ``set_transitions``
            persistence (optional): Object exposing ``save(chain)`` and ``load(chain)``
            rng (optional): Random source exposing ``random()``; defaults to the ``random`` module
            logger (logging.Logger, optional): Logger for model activity
        """
        self.n = max(1, n or NGRAM_ORDER_DEFAULT)
        self.logger = logger or get_logger(clear_existing=False)
        self.rng = rng or random
        self._persistence = persistence
        self._transitions = {}

        if transitions:
            self.set_transitions(transitions)

    @property
    def context_size(self):
        """Number of states forming a context (``n - 1``)."""
        return self.n - 1

    @staticmethod
    def context_key(states):
        """Join context states into the key used by the transition table."""
        return STATE_SEPARATOR.join(states)

    def train(self, states):
        """
        Count every window of ``n`` consecutive states.

        Args:
            states (list of str): Training sequence

        Returns:
            MarkovChainBase: self, so calls can be chained
        """
        windows = 0
        for i in range(len(states) - self.n + 1):
            key = self.context_key(states[i: i + self.n - 1])
            next_state = states[i + self.n - 1]

            transition = self._transitions.setdefault(key, {})
            transition[next_state] = transition.get(next_state, 0) + 1
            windows += 1

        log_json(self.logger, "Markov chain trained", {
            "n": self.n,
            "states": len(states),
            "windows": windows,
            "contexts": len(self._transitions),
        }, level=logging.DEBUG)
        return self

    def set_transitions(self, transitions):
        """
        Load a transition table, replacing the stored entry of every given key.

        Keys that are not part of ``transitions`` keep their current entries.

        Args:
            transitions (dict): Context key -> list of ``[next_state, count]`` pairs
                (a ``{next_state: count}`` mapping is accepted as well)

        Returns:
            MarkovChainBase: self

        Raises:
            InvalidTransitionsError: If a count is not a positive integer; the
                chain is left unchanged
        """
        self._transitions.update(self._validate_transitions(transitions))
        return self

    def _validate_transitions(self, transitions):
        staged = {}
        for key, transition in transitions.items():
            pairs = transition.items() if isinstance(transition, dict) else transition

            entry = {}
            for next_state, count in pairs:
                if isinstance(count, bool) or not isinstance(count, int) or count < 1:
                    self.logger.error("Invalid transition count", extra={
                        "metrics": {"context": key, "next_state": next_state, "count": count}
                    })
                    raise InvalidTransitionsError(
                        f"count for {key!r} -> {next_state!r} must be a positive integer, got {count!r}"
                    )
                entry[next_state] = count

            if entry:
                staged[key] = entry

        return staged

    def get_transition(self, context):
        """
        Next-state counts recorded for a context.

        Args:
            context (str or list of str): Context key or the context states

        Returns:
            dict: Copy of the ``{next_state: count}`` mapping (empty if unknown)
        """
        if not isinstance(context, str):
            context = self.context_key(context)
        return dict(self._transitions.get(context, {}))

    def contexts(self):
        """List of context keys in insertion order."""
        return list(self._transitions)

    def _choose(self, transition):
        total = sum(transition.values())
        r = self.rng.random()

        cumulative_probability = 0.0
        for next_state, count in transition.items():
            cumulative_probability += count / total
            if r <= cumulative_probability:
                return next_state

        # Rounding left r above the final cumulative sum
        return next_state

    def predict(self, states):
        """
        Sample one next state for the context at the end of ``states``.

        Args:
            states (list of str): At least ``n - 1`` states; only the last ``n - 1`` are used

        Returns:
            str or None: The sampled state, or None if the context is a dead end
        """
        if len(states) < self.context_size:
            raise InsufficientContextError(self.context_size, len(states))

        transition = self._transitions.get(
            self.context_key(_last_states(states, self.context_size)))
        if not transition:
            return None
        return self._choose(transition)

    def generate(self, initial_states, stop=1):
        """
        Continue a sequence by walking the chain.

        Args:
            initial_states (list of str): Seed sequence, at least ``n - 1`` states long
            stop (int or callable): Number of steps, or a predicate
                ``(generated_states, step_index) -> bool`` called before every step;
                generation continues while it returns True

        Returns:
            list of str: The seed followed by every generated state

        Raises:
            InsufficientContextError: If the seed is shorter than ``n - 1``
        """
        if len(initial_states) < self.context_size:
            self.logger.error("Not enough states to start generation", extra={
                "metrics": {"required": self.context_size, "actual": len(initial_states)}
            })
            raise InsufficientContextError(self.context_size, len(initial_states))

        if callable(stop):
            condition = stop
        else:
            def condition(_, index):
                return index < stop

        generated_states = list(initial_states)
        context = _last_states(initial_states, self.context_size)

        step = 0
        while condition(generated_states, step):
            key = self.context_key(context)
            transition = self._transitions.get(key)
            if not transition:
                self.logger.debug("Generation reached a dead end", extra={
                    "metrics": {"context": key, "step": step}
                })
                break

            next_state = self._choose(transition)
            generated_states.append(next_state)
            context = _last_states(context + [next_state], self.context_size)
            step += 1

        return generated_states

    def to_portable(self):
        """
        Export the chain as plain JSON compatible data.

        Returns:
            dict: ``{"type": "markov-chain-base", "n": n, "transitions": {...}}``
        """
        return {
            "type": MARKOV_CHAIN_BASE_TYPE,
            "n": self.n,
            "transitions": {
                key: [[next_state, count] for next_state, count in transition.items()]
                for key, transition in self._transitions.items()
            },
        }

    def from_portable(self, data):
        """
        Import data produced by ``to_portable``.

        Data that is missing or tagged with another type is ignored.

        Args:
            data (dict): Portable chain data

        Returns:
            MarkovChainBase: self

        Raises:
            InvalidTransitionsError: If a count is not a positive integer; neither
                the order nor the table is changed
        """
        if not isinstance(data, dict) or data.get("type") != MARKOV_CHAIN_BASE_TYPE:
            self.logger.debug("Ignoring portable data of another type", extra={
                "metrics": {"type": data.get("type") if isinstance(data, dict) else None}
            })
            return self

        staged = self._validate_transitions(data.get("transitions") or {})
        self.n = max(1, data.get("n") or self.n)
        self._transitions.update(staged)
        return self

    def to_json(self, **kwargs):
        """Serialize ``to_portable()`` with ``json.dumps``."""
        return json.dumps(self.to_portable(), **kwargs)

    def from_json(self, text):
        """Load a chain serialized with ``to_json``."""
        return self.from_portable(json.loads(text))

    async def _persist(self, operation):
        if self._persistence is None:
            self.logger.error("Persistence not configured", extra={
                "metrics": {"operation": operation}
            })
            raise NoPersistenceConfiguredError(operation)

        result = getattr(self._persistence, operation)(self)
        if inspect.isawaitable(result):
            result = await result

        log_json(self.logger, f"Markov chain {operation} completed", {
            "n": self.n, "contexts": len(self._transitions)
        })
        return result

    async def save(self):
        """
        Store the chain through the persistence strategy.

        Raises:
            NoPersistenceConfiguredError: If the chain has no persistence strategy
        """
        return await self._persist("save")

    async def load(self):
        """
        Restore the chain through the persistence strategy.

        Raises:
            NoPersistenceConfiguredError: If the chain has no persistence strategy
        """
        return await self._persist("load")
