"""Interviewer framework for human-in-the-loop pipeline gates."""

from pipegraph.interviewer.accelerators import accelerator_key, parse_accelerator
from pipegraph.interviewer.auto_approve import AutoApproveInterviewer
from pipegraph.interviewer.base import Interviewer
from pipegraph.interviewer.callback import CallbackInterviewer
from pipegraph.interviewer.console import ConsoleInterviewer
from pipegraph.interviewer.queue_interviewer import QueueInterviewer

__all__ = [
    "Interviewer",
    "AutoApproveInterviewer",
    "ConsoleInterviewer",
    "CallbackInterviewer",
    "QueueInterviewer",
    "accelerator_key",
    "parse_accelerator",
]
