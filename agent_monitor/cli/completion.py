"""Bash completion for agent-worktree.

Enable it with:
    source <(agent-worktree --completion)
or add that line to ~/.bashrc.
"""

import argparse
import sys
from typing import List

BASH_TEMPLATE = r"""# Bash completion for {prog}
_{func}() {{
    local cur="${{COMP_WORDS[COMP_CWORD]}}"
    local commands="{commands}"
    local options="{options}"
    local command="" word i
    COMPREPLY=()

    for ((i = 1; i < COMP_CWORD; i++)); do
        word="${{COMP_WORDS[i]}}"
        if [[ " ${{commands}} " == *" ${{word}} "* ]]; then
            command="${{word}}"
            break
        fi
    done

    if [[ -z "${{command}}" ]]; then
        local used=" ${{COMP_WORDS[*]:1:COMP_CWORD-1}} " available="" opt
        for opt in ${{options}}; do
            [[ "${{used}}" == *" ${{opt}} "* ]] || available="${{available}} ${{opt}}"
        done
        COMPREPLY=( $(compgen -W "${{commands}} ${{available}}" -- "${{cur}}") )
        return 0
    fi

    # Only the word right after the command is a branch
    (( COMP_CWORD == i + 1 )) || return 0
    git rev-parse --git-dir &> /dev/null || return 0

    # Linked worktree branches; the first record is the main worktree
    local worktree_branches
    worktree_branches=$(git worktree list --porcelain 2> /dev/null \
        | awk '/^worktree /{{n++}} n > 1 && sub(/^branch refs\/heads\//, "")')

    if [[ "${{command}}" == "remove" ]]; then
        COMPREPLY=( $(compgen -W "${{worktree_branches}}" -- "${{cur}}") )
        return 0
    fi

    # add creates new branches: offer remote branches without a local one
    local local_branches candidates="" branch
    local_branches=$(git for-each-ref --format='%(refname:short)' refs/heads 2> /dev/null)
    for branch in $(git for-each-ref --format='%(refname:lstrip=3)' refs/remotes 2> /dev/null | sort -u); do
        [[ "${{branch}}" == "HEAD" ]] && continue
        grep -qxF -- "${{branch}}" <<< "${{local_branches}}" && continue
        candidates="${{candidates}} ${{branch}}"
    done
    COMPREPLY=( $(compgen -W "${{candidates}}" -- "${{cur}}") )
    return 0
}}

complete -F _{func} {prog}
"""


def option_strings(parser: argparse.ArgumentParser) -> List[str]:
    """Every flag the parser accepts, in declaration order."""
    options: List[str] = []
    for action in parser._actions:
        if isinstance(action, argparse._SubParsersAction):
            continue
        options.extend(action.option_strings)
    return options


def command_names(parser: argparse.ArgumentParser) -> List[str]:
    for action in parser._actions:
        if isinstance(action, argparse._SubParsersAction):
            return list(action.choices)
    return []


def bash_completion(parser: argparse.ArgumentParser) -> str:
    """Completion script for parser: commands, flags, and branch names after add/remove."""
    return BASH_TEMPLATE.format(
        prog=parser.prog,
        func=parser.prog.replace("-", "_"),
        commands=" ".join(command_names(parser)),
        options=" ".join(option_strings(parser)),
    )


class PrintCompletionAction(argparse.Action):
    """--completion: print the bash completion script and exit."""

    def __init__(self, option_strings, dest=argparse.SUPPRESS, default=argparse.SUPPRESS, help=None):
        super().__init__(option_strings=option_strings, dest=dest, default=default, nargs=0, help=help)

    def __call__(self, parser, namespace, values, option_string=None):
        sys.stdout.write(bash_completion(parser))
        parser.exit()
