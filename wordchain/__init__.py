#!/usr/bin/env python3
"""
wordchain - Markov Chain Prose Generator
========================================

Trains word-level prefix/suffix Markov chains on a text corpus and
generates new passages that start at a sentence opening and end at a
sentence boundary.

Quick Start
-----------
    from wordchain import ChainModel, ChainGenerator

    model = ChainModel.from_text(open("alice.txt").read(), prefix_length=2)

    # One passage, reproducible with a fixed seed
    text = model.generate(max_words=60, seed=42)

    # Several passages from one random stream
    gen = ChainGenerator(model, seed=42)
    passages = gen.generate_batch(5, max_words=40)

Modules
-------
    wordchain.chain    - Chain model, trainer, generator, persistence
    wordchain.corpus   - Corpus file loading and concatenation
    wordchain.settings - YAML application settings
    wordchain.ui       - Rich terminal rendering

CLI Usage
---------
    python -m wordchain generate alice.txt -k 2 -n 60
    python -m wordchain train posts/ -o model.json
    python -m wordchain stats --model model.json --top 15
"""

__version__ = "0.1.0"
__author__ = "wordchain"

from .chain import (
    ChainModel,
    ChainTrainer,
    ChainGenerator,
    ChainStats,
    GenerationConfig,
    NoSeedError,
    iter_windows,
    truncate_to_sentence,
    save_model,
    load_model,
)
from .corpus import read_corpus, split_words
from .settings import get_setting

__all__ = [
    "__version__",
    "ChainModel",
    "ChainTrainer",
    "ChainGenerator",
    "ChainStats",
    "GenerationConfig",
    "NoSeedError",
    "iter_windows",
    "truncate_to_sentence",
    "save_model",
    "load_model",
    "read_corpus",
    "split_words",
    "get_setting",
]
