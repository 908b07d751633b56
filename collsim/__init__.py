"""Logical topologies, a latency-learning backend wrapper, a memory model and
greedy chunk scheduling for simulating collective communication."""

__version__ = "0.1.0"