# sudscript

`sudscript` reads SUDS dialogue scripts (`.sud` text) and turns them into a
graph of dialogue nodes: speaker lines, choices, conditional and random
selections, variable assignments, events, gotos and gosubs. Text in the
script is collected into a string table keyed by text IDs in the
`@0001@` style, so it can be localised. IDs already written in the script
are kept; missing ones are generated above the highest ID in use.

## Installing

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## A script

```
===
[importsetting GenerateSpeakerLinesFromChoices true]
===
Player: Hello
  * Choice 1
    NPC: I see
  * Choice 2
    NPC: Totally
Player: The end
```

- `Speaker: text` starts a speaker line; a following line with no speaker
  continues it.
- `* text` is a choice; indentation places lines under it. `*- text` never
  generates a speaker line from the choice.
- `[if cond]`, `[elseif cond]`, `[else]`, `[endif]` select a branch.
- `[random]`, `[or]`, `[endrandom]` pick a branch through the internal
  variable `SUDS.RandomItem`.
- `[set Var expr]` or `[set Var = expr]`, `[event Name arg, arg]`,
  `[goto label]` (or `go to`), `[gosub label]` (or `go sub`), `[return]`
  and `:label` lines control flow and state. `end` is the reserved label for
  the end of the dialogue.
- `#` starts a comment. `#= Key: value` attaches metadata to the next line
  only, `#+ Key: value` to every following line until it is reset or the
  indentation moves out; without a key the key is `Comment`.
- A header between two `===` lines at the start may hold `[set ...]` and
  `[importsetting ...]` lines. The import settings are
  `GenerateSpeakerLinesFromChoices` (a boolean) and
  `SpeakerIDForGeneratedLinesFromChoices` (a name literal such as `` `Player` ``).

Expressions accept `true`/`false`, integers and decimals, `"text"`,
`` `names` ``, `masculine`/`feminine`/`neuter`, variables as `{Var}`, the
operators `and`/`&&`, `or`/`||`, `not`/`!`, `==`, `!=`/`<>`, `<`, `<=`,
`>`, `>=`, `+`, `-`, `*`, `/`, `%`, and parentheses.

## Using the library

```python
from sudscript.importer import ImporterSettings, ScriptImporter
from sudscript.messages import MessageLogger
from sudscript.asset import StringTable, populate_script

importer = ScriptImporter(ImporterSettings())
with MessageLogger() as logger:
    with open("intro.sud", encoding="utf-8") as f:
        ok = importer.import_text(f.read(), "intro", logger, False)

if ok:
    script = populate_script(importer, "intro", StringTable("introStrings"))
    print(script.speakers, len(script.nodes), script.string_table.entries)
```

- `sudscript.importer.ScriptImporter.import_text` returns False when the
  script cannot be used; the parsed trees stay on `header_tree` and
  `body_tree`, and `node`, `header_node` and `goto_target_node_index` look
  into them.
- `sudscript.messages.MessageLogger` collects `Message`s with a `Severity`
  (`ERROR`, `WARNING`, `INFO`); `has_errors()` and `num_errors()` count the
  errors. Used as a context manager, or by calling `flush()`, it sends the
  messages to the `sudscript` logger of the `logging` module.
- `sudscript.asset.populate_script` builds a `Script` of `ScriptNode`s and
  `ScriptEdge`s (edge types `CONTINUE`, `DECISION`, `CONDITION`, `CHAINED`),
  with gotos resolved into plain edges and label indexes in `labels`.
  `calculate_hash` gives the MD5 of script text encoded as UTF-16LE.
- `sudscript.expression.Expression.parse` parses an expression and raises
  `ExpressionError` if it is malformed.
- `sudscript.lines` holds the line helpers: `split_lines`, `trim_line`,
  `extract_text_id`, `extract_gosub_id`, `parse_comment_metadata` and
  `format_text_id`.

## Command line

```
sudscript intro.sud
```

imports the script, writes warnings and errors to standard error and prints
a summary of nodes, strings and speakers. Options:

- `--name NAME` – script name (defaults to the file name without extension)
- `--silent` – suppress most import messages
- `--json` – print name, hash, speakers, node counts, labels, strings and
  error count as JSON
- `--generate-speaker-lines` – generate a speaker line from every choice
  unless the script says otherwise
- `--choice-speaker ID` – speaker ID for those lines (default `Player`)

The exit code is 0 on success, 1 when the import fails and 2 when the file
cannot be read.

## What it does not do

The package only imports scripts. It does not run a dialogue (no stepping
through lines, making choices or evaluating conditions at runtime), does not
store or save imported scripts anywhere, and does not create voice or audio
assets for speakers or lines.