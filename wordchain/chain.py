#!/usr/bin/env python3
"""
Prefix/Suffix Markov Chain
==========================
Generates prose using word-level Markov chains trained on a text corpus.

Key features:
- Configurable prefix length (words of context per lookup key)
- Frequency-weighted suffix choice (duplicates are kept, not counted)
- Sentence-opening seeds (prefixes starting with an uppercase letter)
- Output trimmed back to the last complete sentence
- Injectable random source for reproducible output

Theory:
-------
The chain models P(next_word | previous_n_words). Each window of n words is a
"prefix"; the word right after it is a "suffix". Training records every
(prefix, suffix) pair in corpus order:

    Alice was beginning to get very tired ...

    prefix                 suffixes
    ---------------------  ------------
    Alice                  [was]
    Alice was              [beginning]
    Alice was beginning    [to]
    was beginning to       [get]
    beginning to get       [very]

The first n-1 windows are shorter than n while the window ramps up.
Generation starts from a capitalised prefix and keeps choosing a recorded
suffix, sliding the window one word each step, until it reaches a prefix it
never saw or the word budget is spent.
"""

import json
import logging
import random
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Iterator, List, Mapping, Optional, Sequence, Tuple

from wordchain.corpus import split_words
from wordchain.settings import get_setting

logger = logging.getLogger(__name__)

# Separator used to join prefix words into a lookup key
KEY_SEPARATOR = ' '


class NoSeedError(LookupError):
    """Raised when a model has no prefix that can open a sentence."""


# =============================================================================
# WINDOW SCAN
# =============================================================================

def iter_windows(words: Sequence[str],
                 prefix_length: int) -> Iterator[Tuple[Tuple[str, ...], str]]:
    """
    Yield (prefix, suffix) pairs by sliding a window across words.

    At position i the prefix is words[max(0, i - prefix_length + 1) .. i],
    so the first prefix_length - 1 windows are shorter. The scan stops when
    no word follows the window.
    """
    if prefix_length < 1:
        raise ValueError(f"prefix_length must be >= 1, got {prefix_length}")

    for i in range(len(words) - 1):
        start = max(0, i - prefix_length + 1)
        yield tuple(words[start:i + 1]), words[i + 1]


def make_key(words: Sequence[str]) -> str:
    return KEY_SEPARATOR.join(words)


def is_seed_key(key: str) -> bool:
    """A prefix can open a sentence when its first character is uppercase."""
    return bool(key) and key[0].isupper()


# =============================================================================
# MODEL
# =============================================================================

@dataclass
class ChainStats:
    """Summary numbers for a trained chain"""
    prefix_length: int
    prefix_count: int
    observation_count: int
    seed_count: int
    mean_branching: float
    top_prefixes: List[Tuple[str, int]] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'prefix_length': self.prefix_length,
            'prefix_count': self.prefix_count,
            'observation_count': self.observation_count,
            'seed_count': self.seed_count,
            'mean_branching': round(self.mean_branching, 4),
            'top_prefixes': [list(p) for p in self.top_prefixes],
        }


@dataclass(frozen=True)
class ChainModel:
    """
    Word-level Markov chain: prefix key -> suffixes in corpus order.

    Immutable once built. Use ChainModel.from_text() (or ChainTrainer) to
    build one from a corpus.
    """
    prefix_length: int
    transitions: Mapping[str, Tuple[str, ...]] = field(default_factory=dict, hash=False)
    prefixes: Tuple[str, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if self.prefix_length < 1:
            raise ValueError(f"prefix_length must be >= 1, got {self.prefix_length}")

        frozen = {}
        for key, suffixes in self.transitions.items():
            suffixes = tuple(suffixes)
            if not suffixes:
                raise ValueError(f"Prefix '{key}' has no suffixes")
            frozen[key] = suffixes

        object.__setattr__(self, 'transitions', MappingProxyType(frozen))
        object.__setattr__(self, 'prefixes', tuple(frozen))

    @classmethod
    def from_text(cls, text: str, prefix_length: Optional[int] = None) -> 'ChainModel':
        """Build a model from raw corpus text"""
        return ChainTrainer(prefix_length=prefix_length).train(text)

    def __len__(self) -> int:
        return len(self.transitions)

    def __contains__(self, key) -> bool:
        return key in self.transitions

    def suffixes(self, key: str) -> Tuple[str, ...]:
        """Suffixes recorded for key, or an empty tuple if it was never seen"""
        return self.transitions.get(key, ())

    @property
    def seed_keys(self) -> Tuple[str, ...]:
        return tuple(k for k in self.prefixes if is_seed_key(k))

    def generate(self,
                 max_words: Optional[int] = None,
                 rng: Optional[random.Random] = None,
                 seed: Optional[int] = None) -> str:
        """Shortcut for ChainGenerator(self, rng=rng, seed=seed).generate()"""
        return ChainGenerator(self, rng=rng, seed=seed).generate(max_words)

    def stats(self, top: int = 10) -> ChainStats:
        observations = {k: len(v) for k, v in self.transitions.items()}
        branching = [len(set(v)) for v in self.transitions.values()]
        top_prefixes = Counter(observations).most_common(top) if top > 0 else []

        return ChainStats(
            prefix_length=self.prefix_length,
            prefix_count=len(self.transitions),
            observation_count=sum(observations.values()),
            seed_count=len(self.seed_keys),
            mean_branching=sum(branching) / len(branching) if branching else 0.0,
            top_prefixes=top_prefixes,
        )

    def to_dict(self) -> dict:
        """Serialize model to dictionary"""
        return {
            'prefix_length': self.prefix_length,
            'transitions': {k: list(v) for k, v in self.transitions.items()},
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'ChainModel':
        """Deserialize model from dictionary"""
        if not isinstance(data, dict) or 'prefix_length' not in data:
            raise ValueError("Model data must contain 'prefix_length'")

        prefix_length = data['prefix_length']
        if not isinstance(prefix_length, int) or isinstance(prefix_length, bool):
            raise ValueError(f"Invalid prefix_length: {prefix_length!r}")

        transitions = data.get('transitions') or {}
        if not isinstance(transitions, dict):
            raise ValueError("'transitions' must be a mapping")

        for key, suffixes in transitions.items():
            if not isinstance(key, str):
                raise ValueError(f"Prefix {key!r} must be a string")
            if len(key.split(KEY_SEPARATOR)) > prefix_length:
                raise ValueError(
                    f"Prefix '{key}' is longer than prefix_length={prefix_length}"
                )
            if not isinstance(suffixes, list):
                raise ValueError(f"Suffixes for '{key}' must be a list")
            for suffix in suffixes:
                if not isinstance(suffix, str):
                    raise ValueError(f"Suffix {suffix!r} for '{key}' must be a string")

        return cls(prefix_length=prefix_length, transitions=transitions)


class ChainTrainer:
    """Trains word-level chains on a corpus"""

    def __init__(self, prefix_length: Optional[int] = None):
        if prefix_length is None:
            prefix_length = get_setting("chain.prefix_length", 2)
        if prefix_length < 1:
            raise ValueError(f"prefix_length must be >= 1, got {prefix_length}")
        self.prefix_length = prefix_length

    def train(self, text: str) -> ChainModel:
        """Train a chain on corpus text (split on whitespace)"""
        return self.train_words(split_words(text))

    def train_words(self, words: Sequence[str]) -> ChainModel:
        transitions = {}
        for prefix, suffix in iter_windows(words, self.prefix_length):
            key = make_key(prefix)
            if key in transitions:
                transitions[key].append(suffix)
            else:
                transitions[key] = [suffix]

        logger.debug(
            f"Trained chain: {len(words)} words, {len(transitions)} prefixes "
            f"(prefix_length={self.prefix_length})"
        )
        return ChainModel(prefix_length=self.prefix_length, transitions=transitions)


# =============================================================================
# GENERATOR
# =============================================================================

@dataclass
class GenerationConfig:
    """Generation settings; None fields are filled from app.yaml"""
    max_words: Optional[int] = None
    seed_attempts_per_prefix: Optional[int] = None
    sentence_terminators: Optional[str] = None
    closing_marks: Optional[str] = None

    def __post_init__(self):
        cfg = get_setting("generation", {}) or {}
        if self.max_words is None:
            self.max_words = cfg.get("max_words", 50)
        if self.seed_attempts_per_prefix is None:
            self.seed_attempts_per_prefix = cfg.get("seed_attempts_per_prefix", 10)
        if self.sentence_terminators is None:
            self.sentence_terminators = cfg.get("sentence_terminators", ".!?")
        if self.closing_marks is None:
            self.closing_marks = cfg.get("closing_marks", "\"')]")

        if self.max_words < 0:
            raise ValueError(f"max_words must be >= 0, got {self.max_words}")
        if self.seed_attempts_per_prefix < 1:
            raise ValueError(
                f"seed_attempts_per_prefix must be >= 1, got {self.seed_attempts_per_prefix}"
            )
        if not self.sentence_terminators:
            raise ValueError("sentence_terminators must not be empty")


def ends_sentence(word: str,
                  terminators: str = ".!?",
                  closing_marks: str = "\"')]") -> bool:
    """True if word ends with a terminator, ignoring trailing closing marks"""
    stripped = word.rstrip(closing_marks)
    return bool(stripped) and stripped[-1] in terminators


def truncate_to_sentence(words: Sequence[str],
                         terminators: str = ".!?",
                         closing_marks: str = "\"')]") -> List[str]:
    """
    Cut words after the last one that ends a sentence.

    Returns the words unchanged when none of them ends a sentence.
    """
    for i in range(len(words) - 1, -1, -1):
        if ends_sentence(words[i], terminators, closing_marks):
            return list(words[:i + 1])
    return list(words)


class ChainGenerator:
    """Generates text by walking a trained ChainModel"""

    def __init__(self,
                 model: ChainModel,
                 rng: Optional[random.Random] = None,
                 seed: Optional[int] = None,
                 config: Optional[GenerationConfig] = None):
        """
        Initialize generator.

        Args:
            model: Trained chain
            rng: Random source (takes precedence over seed)
            seed: Seed for a private random.Random when rng is not given
            config: Generation settings (defaults from app.yaml)
        """
        self.model = model
        self.rng = rng if rng is not None else random.Random(seed)
        self.config = config or GenerationConfig()

    def choose_seed(self) -> str:
        """
        Pick a random prefix that starts with an uppercase letter.

        Candidates are drawn uniformly from all prefixes and rejected until
        one qualifies. Attempts are capped at seed_attempts_per_prefix times
        the number of prefixes.

        Raises:
            NoSeedError: model is empty, has no capitalised prefix, or the
                attempt budget ran out
        """
        prefixes = self.model.prefixes
        if not prefixes:
            raise NoSeedError("Model is empty; no seed available")
        if not any(is_seed_key(k) for k in prefixes):
            raise NoSeedError("No prefix starts with an uppercase letter; no seed available")

        max_attempts = self.config.seed_attempts_per_prefix * len(prefixes)
        for _ in range(max_attempts):
            candidate = prefixes[self.rng.randrange(len(prefixes))]
            if is_seed_key(candidate):
                return candidate

        raise NoSeedError(f"No seed found after {max_attempts} attempts")

    def walk(self, seed: str, max_words: int) -> List[str]:
        """
        Walk the chain from seed, returning seed words plus up to max_words
        suffixes. The state keeps the seed's width as it slides.
        """
        if max_words < 0:
            raise ValueError(f"max_words must be >= 0, got {max_words}")

        state = seed.split(KEY_SEPARATOR)
        words = list(state)

        for _ in range(max_words):
            suffixes = self.model.suffixes(make_key(state))
            if not suffixes:
                logger.debug(f"Walk stopped at unknown prefix '{make_key(state)}'")
                break
            suffix = suffixes[self.rng.randrange(len(suffixes))]
            words.append(suffix)
            state = state[1:] + [suffix]

        return words

    def generate(self, max_words: Optional[int] = None) -> str:
        """
        Generate a passage.

        Args:
            max_words: Maximum number of suffix words after the seed
                (default from config)

        Returns:
            Text starting with the seed and ending at the last sentence
            boundary, or the untrimmed walk if no sentence ends in it.
            Empty string if the model has no usable seed.
        """
        if max_words is None:
            max_words = self.config.max_words
        if max_words < 0:
            raise ValueError(f"max_words must be >= 0, got {max_words}")

        try:
            seed = self.choose_seed()
        except NoSeedError as e:
            logger.warning(str(e))
            return ''

        words = self.walk(seed, max_words)
        words = truncate_to_sentence(
            words,
            self.config.sentence_terminators,
            self.config.closing_marks,
        )
        return KEY_SEPARATOR.join(words)

    def generate_batch(self, count: int, max_words: Optional[int] = None) -> List[str]:
        """Generate count passages, skipping empty results"""
        results = []
        for _ in range(count):
            text = self.generate(max_words)
            if text:
                results.append(text)
        return results


# =============================================================================
# PERSISTENCE
# =============================================================================

def save_model(model: ChainModel, filepath):
    """Save a trained model to a JSON file"""
    Path(filepath).write_text(json.dumps(model.to_dict(), indent=2, ensure_ascii=False),
                              encoding='utf-8')
    logger.info(f"Saved model with {len(model)} prefixes to {filepath}")


def load_model(filepath) -> ChainModel:
    """Load a trained model from a JSON file"""
    try:
        data = json.loads(Path(filepath).read_text(encoding='utf-8'))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid model file {filepath}: {e}") from e
    return ChainModel.from_dict(data)
