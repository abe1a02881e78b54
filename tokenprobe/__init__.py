"""
tokenprobe: next-token probability probe for causal language models.

Given a prompt and comma-separated target strings, reports the model's
probability for each target token at the position after the prompt, over
HTTP or from the command line.
"""

__version__ = "0.1.0"
