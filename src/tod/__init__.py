"""tod - pick the next Todoist task from the command line."""
