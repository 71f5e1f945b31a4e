"""Built-in CLI sub-commands for exportswagger.

* :mod:`~exportswagger.commands.export` -- ``export`` runs the pipeline,
  ``resolve`` only looks up the REST API id.
* :mod:`~exportswagger.commands.config` -- show the effective settings.

Single commands are plain callbacks registered on the root app; groups
export a :class:`typer.Typer` sub-application.
"""
