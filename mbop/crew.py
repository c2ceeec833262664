"""Crew members, their tools, the replies they give and the prompts that drive them."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, fields
from typing import Any, ClassVar, Iterable, Mapping

from .llm import CompletionHistory

FORMAT_MSG_START = """You run in a loop of Thought, Command, PAUSE, Observation.
You are a crew member who is designed to complete a task your manager has given you. 
You are to complete these tasks by utilizing the tools made available to you. 
If you do not need to use a tool just return the report.
As part of this you are expected to respond using only the following options. Do not make up actions or tools.

To perform an action use the following:
{"thought": "Describe your current thoughts about the task you are given","type": "action","tool": "What tool to use if any","data": "data to pass with the action"}
PAUSE

To write your report use the following:
{"thought":"Describe your current thoughts about the task you are given","type": "report","response":"put the report here"}
PAUSE

Your available tools are:"""

FORMAT_MSG_END = """Example Session:
Task: Tell me what the capital of france is
{"thought":"I should look up this information of wikipedia","type":"action", "tool":"wikipedia", "data": "France"}
PAUSE
Observation: France is a country. The capital is Paris.
{"thought":"The thought about your current answer", type": "report", "response":"The capital of France is Paris"}
PAUSE

Your response should only ever be in correct json. Do not include anything else. Replace all new lines with \\n.
"""

CAPTAIN_MSG_START = """You run in a loop of Thought, Command, PAUSE, Result.
You are the crew captain who is designed to delegate and complete task given to you.
You are to prioritize delegating portions of the task to multiple individuals on your crew. 
As part of this you are expected to respond using only the following options. Do not make up actions or tools.

The format for Delegating a task to a crew member must be the following:
{"thought":"Describe your current thoughts about the task you are given", "type": "delegate", "crew":"developer","data":"task to perform"}

The format for answering must be the following:
{"thought":"Describe your current thoughts about the task you are given", "type": "answer","result":"put the result here"}

Your thought cannot be empty!!!

When returning an answer make sure to include all relevant information in it given to you by your crew members.

Your available crew members are:"""

CAPTAIN_MSG_END = """Example session:
Question: What is the capital of France?
{"thought":"i should delegate to a crew member that knows countries", "type": "delegate", "crew":"historian","data":"task to perform"}
PAUSE
Result: France is a country. The capital is Paris.
{"thought":"I have collected the information", "type": "answer", "result":"The capital of France is Paris"}
PAUSE

Your response should only ever be in json. Do not include anything else."""

INCORRECT_FORMAT_MSG = """Your last json formatted response was not valid please ensure it is in the following correct json format:
{"thought": "Describe your current thoughts about the task you are given","type": "action","tool": "What tool to use if any","data": "Data to pass with the action"}
Do not include anything else but the json response your job relies on this."""


class ToolError(Exception):
    """A tool could not produce a result."""


class Tool(ABC):
    """Something a crew member can use; subclasses set name, example and description."""

    name: ClassVar[str]
    example: ClassVar[str]
    description: ClassVar[str]

    @abstractmethod
    def run(self, *args: str) -> str:
        """Run the tool and return its output; raise ToolError on failure."""


def _match_keys(data: Any, names: Iterable[str]) -> dict[str, Any]:
    """Map JSON object keys onto field names, ignoring case; later keys win."""
    if not isinstance(data, Mapping):
        raise ValueError("expected a JSON object")
    lookup = {name.replace("_", "").lower(): name for name in names}
    matched: dict[str, Any] = {}
    for key, value in data.items():
        name = lookup.get(str(key).lower())
        if name is not None and value is not None:
            matched[name] = value
    return matched


def _require(value: Any, kind: type, name: str) -> Any:
    if not isinstance(value, kind):
        raise ValueError(f"field {name!r} must be of type {kind.__name__}")
    return value


@dataclass
class CrewResponse:
    """One reply from a crew member or the captain."""

    type: str = ""
    thought: str = ""
    crew: str = ""
    data: str = ""
    tool: str = ""
    response: str = ""
    result: str = ""

    @classmethod
    def from_json(cls, text: str) -> CrewResponse:
        """Parse a reply; raise ValueError if it is not a JSON object of strings."""
        names = [f.name for f in fields(cls)]
        values = _match_keys(json.loads(text), names)
        return cls(**{name: _require(value, str, name) for name, value in values.items()})


def agents_to_prompt(agents: Iterable[Agent]) -> str:
    return "".join("\n" + agent.role for agent in agents)


def tools_to_prompt(tools: Mapping[str, Tool]) -> str:
    return "".join(
        f"\n{tool.name}\n{tool.example}\n{tool.description}\n" for tool in tools.values()
    )


@dataclass
class Agent:
    """A crew member, or the captain, with its own conversation."""

    role: str = ""
    goal: str = ""
    persona: str = ""
    is_captain: bool = False
    context: CompletionHistory = field(default_factory=lambda: CompletionHistory(model=""))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], model: str) -> Agent:
        """Build an agent from its definition; its conversation uses ``model``."""
        values = _match_keys(data, ["role", "goal", "persona", "is_captain"])
        for name in ("role", "goal", "persona"):
            if name in values:
                _require(values[name], str, name)
        if "is_captain" in values:
            _require(values["is_captain"], bool, "is_captain")
        return cls(**values, context=CompletionHistory(model=model))

    def _prompt(self, start: str, listing: str, end: str) -> str:
        return (
            f"{self.role}\n{self.persona}\nYour personal goal is: {self.goal}\n\n"
            f"{start}\n{listing}\n\n{end}"
        )

    def captain_prompt(self, agents: Iterable[Agent]) -> str:
        return self._prompt(CAPTAIN_MSG_START, agents_to_prompt(agents), CAPTAIN_MSG_END)

    def agent_prompt(self, tools: Mapping[str, Tool]) -> str:
        return self._prompt(FORMAT_MSG_START, tools_to_prompt(tools), FORMAT_MSG_END)