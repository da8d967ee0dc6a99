"""Sample entries shown in an empty library."""

from .schema import Category, CodeSnippet, KnowledgeEntry


def sample_entries() -> list[KnowledgeEntry]:
    return [
        KnowledgeEntry(
            id="1",
            title="Undo the last commit in Git",
            category=Category.PROCEDURE,
            raw_content=(
                "To undo a commit, use git reset. If you want to keep the files in your "
                "staging area, use --soft. If you want to discard everything, use --hard. "
                "Be careful with --hard because it deletes your work."
            ),
            summary=(
                "To undo the last commit but keep your changes in the staging area, "
                "use a soft reset."
            ),
            steps=[
                "Open your terminal.",
                "Navigate to the repository.",
                "Run: git reset --soft HEAD~1",
                "Your files are now staged and ready for a new commit.",
            ],
            code_snippets=[
                CodeSnippet(
                    language="bash",
                    code="git reset --soft HEAD~1",
                    description="Undoes the commit but keeps the changes staged.",
                ),
                CodeSnippet(
                    language="bash",
                    code="git reset --hard HEAD~1",
                    description="CAUTION: undoes the commit and DELETES all changes.",
                ),
            ],
            mermaid_chart=(
                "flowchart LR\n"
                "  A[Commit made] --> B{Mistake?}\n"
                "  B -- Yes --> C[Run git reset --soft]\n"
                "  C --> D[Changes staged]\n"
                "  D --> E[Fix code]\n"
                "  E --> F[Commit again]"
            ),
            tags=["git", "version-control", "terminal"],
        )
    ]
