"""
Shell completion scripts.

The scripts are static; context names are looked up at completion time by
calling ``gh-signoff completion --contexts``.

    eval "$(gh-signoff completion)"              # bash
    eval "$(gh-signoff completion --shell zsh)"  # zsh
"""
from string import Template

COMMANDS = ("create", "install", "uninstall", "check", "status", "version", "completion", "help")
SHELLS = ("bash", "zsh")

BASH_TEMPLATE = Template("""\
_${func}() {
  local cur prev commands contexts
  cur="$${COMP_WORDS[COMP_CWORD]}"
  prev="$${COMP_WORDS[COMP_CWORD-1]}"
  commands="${commands}"

  if [[ "$$prev" == "--branch" ]]; then
    COMPREPLY=( $$(compgen -W "$$(git for-each-ref --format='%(refname:short)' refs/heads 2>/dev/null)" -- "$$cur") )
    return 0
  fi

  if [[ "$$cur" == -* ]]; then
    COMPREPLY=( $$(compgen -W "-f --force --branch --yes --help" -- "$$cur") )
    return 0
  fi

  if [[ $$COMP_CWORD -eq 1 ]]; then
    contexts="$$(${prog} completion --contexts 2>/dev/null)"
    COMPREPLY=( $$(compgen -W "$$commands $$contexts" -- "$$cur") )
    return 0
  fi

  contexts="$$(${prog} completion --contexts 2>/dev/null)"
  COMPREPLY=( $$(compgen -W "$$contexts" -- "$$cur") )
}
complete -F _${func} ${prog}
""")

ZSH_TEMPLATE = Template("""\
#compdef ${prog}

_${func}() {
  local -a commands contexts
  commands=(${commands})
  contexts=($${(f)"$$(${prog} completion --contexts 2>/dev/null)"})

  if [[ "$${words[CURRENT-1]}" == "--branch" ]]; then
    local -a branches
    branches=($${(f)"$$(git for-each-ref --format='%(refname:short)' refs/heads 2>/dev/null)"})
    compadd -a branches
    return
  fi

  if (( CURRENT == 2 )); then
    compadd -a commands
  fi
  compadd -a contexts
}

compdef _${func} ${prog}
""")


def render_completion(shell: str = "bash", prog: str = "gh-signoff") -> str:
    """
    Completion script for ``shell``.

    Raises:
        ValueError: For shells other than bash and zsh
    """
    templates = {"bash": BASH_TEMPLATE, "zsh": ZSH_TEMPLATE}
    if shell not in templates:
        raise ValueError(f"unsupported shell: {shell} (choose from {', '.join(SHELLS)})")

    return templates[shell].substitute(
        prog=prog,
        func=prog.replace("-", "_"),
        commands=" ".join(COMMANDS),
    )


def render_contexts(labels: list[str]) -> str:
    """Context labels, one per line, for the completion scripts to read."""
    return "\n".join(labels)
