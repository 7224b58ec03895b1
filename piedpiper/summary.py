# piedpiper/summary.py

import logging
from pathlib import Path
from typing import Optional

from jinja2 import Template

from piedpiper.config import Config
from piedpiper.walker import Collision, WalkReport

logger = logging.getLogger(__name__)


SUMMARY_NAME = "README.md"

SUMMARY_TEMPLATE = """\
# {{ target }} Folder Overview

This folder contains a flattened version of a project directory structure, where all files have been copied from their original subdirectories into this single `{{ target }}` folder. The purpose is to allow a Large Language Model (LLM) to ingest and understand the entire project structure in one shot by attaching these files.

## Naming Convention
- Each file is renamed to reflect its original folder path.
- Folder names are concatenated with underscores (`_`), followed by the original filename.
- Example: A file originally at `./functions/fetchTournaments/fetchTournaments.js` becomes `functions_fetchTournaments_fetchTournaments.js`.
- If a file was in the root directory, it retains its original name.
- Special cases:
{% for ext in extensions %}
  - Files with a `{{ ext }}` extension have `.txt` appended (e.g., `myfile{{ ext }}` becomes `myfile{{ ext }}.txt`).
{% endfor %}
  - Files with no extension have `.txt` appended (e.g., `myfile` becomes `myfile.txt`).

## Process
1. The `{{ target }}` folder is cleared (if it exists) or created (if it doesn't).
2. The source directory is crawled recursively, ignoring:
   - Folders: {{ config.ignored_folders | join(', ') }}
   - Files: {{ config.ignored_files | join(', ') }}
   - Patterns: {{ config.ignored_patterns | join(', ') }}
3. All other files are copied here with their new names, applying the extension rules above.
{% if filter_token %}

## Filter
Only files containing "{{ filter_token }}" in their path were included.
{% endif %}

## Files
{% for record in report.copied %}
- `{{ record.destination_name }}` <- `{{ record.relative_path }}`
{% else %}
No files were copied.
{% endfor %}
{% if report.collisions %}

## Name Collisions
{% for c in report.collisions %}
- `{{ c.destination_name }}`: `{{ c.winner.as_posix() }}` replaced `{{ c.overwritten.as_posix() }}`
{% endfor %}
{% endif %}
{% if report.errors %}

## Skipped On Error
{% for err in report.errors %}
- {{ err.kind }}: `{{ err.path.as_posix() }}`
{% endfor %}
{% endif %}

## Usage
Attach all files in this folder to an LLM to provide a complete view of the project's codebase, with file paths embedded in the filenames for context.
"""


def render_summary(config: Config, report: WalkReport, filter_token: Optional[str] = None) -> str:
    """Render the summary Markdown for a finished walk."""
    template = Template(SUMMARY_TEMPLATE, trim_blocks=True, lstrip_blocks=True)
    return template.render(
        target=Path(config.target_folder).name,
        extensions=config.extensions_to_append_txt,
        config=config,
        report=report,
        filter_token=filter_token,
    )


def write_summary(config: Config, report: WalkReport, filter_token: Optional[str] = None) -> Path:
    summary_path = Path(config.target_folder) / SUMMARY_NAME
    replaced = report.by_name.pop(SUMMARY_NAME, None)
    if replaced is not None:
        logger.warning(
            "Copied file %s is replaced by the generated %s",
            replaced.source, SUMMARY_NAME,
        )
        report.collisions.append(Collision(SUMMARY_NAME, replaced.source, summary_path))
    summary_path.write_text(
        render_summary(config, report, filter_token), encoding="utf-8"
    )
    logger.info("Created: %s", summary_path)
    return summary_path
