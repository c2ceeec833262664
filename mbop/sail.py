"""The captain-and-crew loop that works a task through delegation and tools."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Mapping

import click

from .crew import INCORRECT_FORMAT_MSG, Agent, CrewResponse, Tool, ToolError
from .llm import Message, OpenAIClient
from .util import elliptical_truncate
from .wikipedia import Wikipedia

log = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-3.5-turbo"
CHARACTER_TRIM = 40
MAX_ROUNDS = 100
NO_TOOL_OUTPUT = "no tool output"

_JSON_PATTERN = re.compile(r'{[\s\S]*?"[\s\S]*?:[\s\S]*?"[\s\S]*?}+')


class AgentNotFoundError(LookupError):
    """No crew member with the requested role exists."""


def extract_json(text: str) -> str:
    """Return the first JSON-looking object in ``text``; raise ValueError if there is none."""
    match = _JSON_PATTERN.search(text)
    if match is None or not match.group(0):
        raise ValueError("no JSON content found")
    return match.group(0).strip()


def _say(text: str, colour: str) -> None:
    click.secho(text, fg=colour, nl=not text.endswith("\n"))


class SailManager:
    """Loads a crew from a directory and lets its captain work a task."""

    def __init__(
        self,
        task: str,
        agent_dir: str | Path,
        model: str = DEFAULT_MODEL,
        debug: bool = False,
        client: Any = None,
        tools: Mapping[str, Tool] | None = None,
    ):
        self.task = task
        self.agent_dir = Path(agent_dir)
        self.model = model
        self.debug = debug
        self.client = client if client is not None else OpenAIClient.from_env()
        if tools is None:
            wiki = Wikipedia()
            tools = {wiki.name: wiki}
        self.tools: dict[str, Tool] = dict(tools)
        self.captain: Agent | None = None
        self.agents: list[Agent] = []

    def load_agents(self) -> None:
        """Read every ``.json`` agent definition in the crew directory."""
        for entry in sorted(self.agent_dir.iterdir()):
            if entry.is_dir() or entry.suffix != ".json":
                continue
            try:
                text = entry.read_text(encoding="utf-8")
            except OSError as exc:
                log.error("failed to read file %s: %s", entry, exc)
                continue
            try:
                agent = Agent.from_dict(json.loads(text), self.model)
            except ValueError as exc:
                log.error("failed to parse agent definition %s: %s", entry, exc)
                continue
            log.info("found agent %s in %s", agent.role, entry)
            if agent.is_captain:
                self.captain = agent
            else:
                self.agents.append(agent)

    def find_agent(self, role: str) -> Agent:
        """Return the crew member with ``role``, compared without regard to case."""
        wanted = role.lower()
        for agent in self.agents:
            if agent.role.lower() == wanted:
                return agent
        raise AgentNotFoundError(f"no agent with role {role} found")

    def run_tool(self, name: str, data: str) -> str:
        """Run the named tool; unknown tools give a placeholder output."""
        log.info("attempting to use tool %s", name)
        tool = self.tools.get(name)
        if tool is None:
            if name.lower() not in ("none", "nil"):
                log.warning("attempt to use unknown tool %s", name)
            return NO_TOOL_OUTPUT
        return tool.run(data)

    def _handle(self, command: CrewResponse, active: Agent, state: dict[str, Any]) -> tuple[Agent, bool]:
        """Act on one reply; return the next active agent and whether it failed."""
        kind = command.type.lower()
        if kind == "action":
            log.info("action by %s: %s", active.role, elliptical_truncate(command.data, CHARACTER_TRIM))
            try:
                output = self.run_tool(command.tool, command.data)
            except ToolError:
                log.warning("invalid tool requested: %s", command.tool)
                return active, True
            active.context.add(Message(role="user", content=f"Observation: {output}"))
        elif kind == "delegate":
            log.info("delegate by %s: %s", active.role, elliptical_truncate(command.data, CHARACTER_TRIM))
            try:
                found = self.find_agent(command.crew)
            except AgentNotFoundError:
                log.debug("invalid agent requested: %s", command.crew)
                return active, True
            active = found
            active.context.add(
                Message(
                    role="user",
                    content=(
                        f"{active.agent_prompt(self.tools)}\n"
                        f"Relevant Information: {state['report']}\n\n"
                        f"Current Task: {command.data}"
                    ),
                )
            )
        elif kind == "report":
            previous = active
            active = self.captain
            state["report"] = command.response
            active.context.add(Message(role="user", content=f"Result: {command.response}"))
            log.info("reporting from %s to %s", previous.role, active.role)
        elif kind == "answer":
            state["answer"] = command.result
        return active, False

    def process_agents(self) -> tuple[str, str] | None:
        """Run the loop; return (answer, last report), or None if no answer came."""
        if self.captain is None:
            raise AgentNotFoundError("no captain agent found")
        active = self.captain
        state: dict[str, Any] = {"report": "", "answer": None}

        active.context.add(
            Message(
                role="user",
                content=f"{active.captain_prompt(self.agents)}\nCurrent Task: {self.task}",
            )
        )
        if self.debug:
            first = active.context.messages[0]
            _say(f"Role: {active.role}\nContent: {first.content}\n\n", "cyan")
        log.info("sail process started by %s on task %s", active.role, self.task)

        for _ in range(MAX_ROUNDS):
            failure = False
            raw, _response = self.client.get_completion(active.context)
            try:
                completion = extract_json(raw)
            except ValueError:
                failure = True

            if not failure:
                active.context.add(Message(role="assistant", content=completion))
                if self.debug:
                    _say(f"Response:\n{completion}\n", "yellow")
                try:
                    command = CrewResponse.from_json(completion)
                except ValueError:
                    log.debug(
                        "invalid command format received: %s",
                        elliptical_truncate(completion, CHARACTER_TRIM),
                    )
                    command = CrewResponse()
                    failure = True
                log.info("update from %s: %s", active.role, command.thought)

                active, failed = self._handle(command, active, state)
                failure = failure or failed
                if state["answer"] is not None:
                    _say(f"\nAnswer: \n{state['answer']}", "green")
                    _say(f"\nReport: \n{state['report']}", "green")
                    return state["answer"], state["report"]

            if failure:
                active.context.add(Message(role="user", content=INCORRECT_FORMAT_MSG))
                log.debug("attempting to query again, desired response format invalid")

            if self.debug:
                _say(active.context.format_latest(), "cyan")

        return None

    def run(self) -> tuple[str, str] | None:
        """Load the crew and work the task."""
        self.load_agents()
        return self.process_agents()