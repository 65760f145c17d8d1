#!/usr/bin/env python3
"""
Terminal UI
===========
Rich-based rendering for chain statistics and generated passages.

Usage:
    from wordchain.ui import render_stats, render_passages

    render_stats(model.stats(top=10))
    render_passages(["Alice was beginning to get very tired."])
"""

from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich import box

from wordchain.chain import ChainStats


def stats_table(stats: ChainStats) -> Table:
    """Build the summary + top-prefix table for a chain."""
    table = Table(title="Chain Statistics", box=box.SIMPLE_HEAVY, show_header=True)
    table.add_column("Prefix", style="cyan", no_wrap=True)
    table.add_column("Observations", justify="right", style="green")

    for prefix, count in stats.top_prefixes:
        table.add_row(Text(prefix), str(count))

    table.caption = (
        f"prefix length {stats.prefix_length} | "
        f"{stats.prefix_count} prefixes | "
        f"{stats.observation_count} observations | "
        f"{stats.seed_count} seeds | "
        f"branching {stats.mean_branching:.2f}"
    )
    return table


def render_stats(stats: ChainStats, console: Optional[Console] = None):
    console = console or Console()
    console.print(stats_table(stats))


def render_passages(passages: List[str], console: Optional[Console] = None):
    """Print each passage in its own panel, numbered."""
    console = console or Console()
    for i, text in enumerate(passages, 1):
        console.print(Panel(Text(text), title=f"#{i}", title_align="left", expand=False))
