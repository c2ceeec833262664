# mbop

Merry Band of Pirates: multi-agent automation on top of an OpenAI-compatible
chat-completion API. A captain agent takes a task, delegates parts of it to
crew members, collects their reports and gives an answer. Crew members can
use tools; one tool is built in, `wikipedia`, which returns the introduction
of the Wikipedia article with the given title.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Configuration

The API is reached through two environment variables, both required:

```
export OPENAI_BASE_URL=https://llm.example.com/v1
export OPENAI_AUTH_TOKEN=token
```

Requests go to `$OPENAI_BASE_URL/models` and
`$OPENAI_BASE_URL/chat/completions`, with the header
`Authorization: Bearer <OPENAI_AUTH_TOKEN>`. Completions are asked for with
`max_tokens` 8192 and `temperature` 0.1.

Log output goes to standard output and to `./logs/mbop.log` (the `logs`
directory is created if needed). Set `LOG_FILE` to write the log file
somewhere else, or `DISABLE_LOG_FILE=true` (also `1`, `t`, `True`, ...) to log
to standard output only.

## Defining a crew

Each agent is a `.json` file in the crew directory, which is `./crew` by
default. Keys are matched without regard to case, so `Role` and `role` both
work. One agent should be the captain; the others are crew members:

```json
{"Role": "captain", "Goal": "Answer the question fully", "Persona": "A seasoned leader", "IsCaptain": true}
```

```json
{"Role": "historian", "Goal": "Research historical facts", "Persona": "A careful scholar", "IsCaptain": false}
```

Files that cannot be read or parsed are logged and skipped. If several
captains are defined, the last one read (in file-name order) is used.

## How a task is worked

The captain is given its prompt, the list of crew roles and the task. Each
reply from the model is expected to hold a JSON object with a `type`:

- `delegate`: the crew member named in `crew` becomes active and is given
  the task in `data`, together with the last report received.
- `action`: the active crew member runs the tool named in `tool` with `data`;
  the output is fed back as an observation. An unknown tool yields
  `no tool output`.
- `report`: the crew member's `response` goes back to the captain, who
  becomes active again.
- `answer`: the captain's `result` is printed in green together with the last
  report, and the work ends.

A reply without valid JSON, an unknown crew member or a failing tool makes
the active agent be asked again for a correctly formatted reply. The loop
stops after 100 rounds if no answer has come.

## Commands

```
mbop sail --task "What is the capital of France?" [--model gpt-3.5-turbo] [--crewDir ./crew] [--debug]
mbop chatCompletion --query "Hello" [--model gpt-3.5-turbo]
mbop retrieveModels
mbop version
mbop quit
```

- `sail` (alias `s`) works a task with the crew. `--debug` echoes the
  prompts and replies to the terminal in colour.
- `chatCompletion` (alias `cc`) checks the connection, sends one user
  message and logs the reply.
- `retrieveModels` (alias `rm`) logs the id, object and owner of each model
  the API lists.
- `version` (alias `v`) prints the version, OS and architecture, and Python
  version.
- `quit` (aliases `exit`, `bye`, `x`, `q`) exits with status 0.

Every command prints a banner first. Failures are reported on standard error
and give a non-zero exit status.

## Library use

```python
from mbop.sail import SailManager

result = SailManager(
    task="What is the capital of France?",
    agent_dir="./crew",
    model="gpt-3.5-turbo",
).run()
if result is not None:
    answer, report = result
```

`SailManager` reads its client from the environment unless one is passed as
`client`; `tools` takes a mapping of name to `mbop.crew.Tool`, and defaults
to the Wikipedia tool. `mbop.llm.OpenAIClient` can be used on its own for
`get_models()` and `get_completion(history)`.

## What it does not do

There is no interactive shell: each command runs once and exits, so `quit`
only ends the program. Replies are not streamed, and the only built-in tool
is the Wikipedia lookup.