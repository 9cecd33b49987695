import click


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
def root():
    """Apply, roll back and inspect versioned SQL migrations on PostgreSQL."""
