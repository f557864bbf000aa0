"""Built-in CLI commands for specdesk.

* :mod:`~specdesk.commands.catalog` -- ``info``, ``apps``, ``tags``,
  ``list``, ``show``, ``snippet`` and ``run``, registered on the root app.
* :mod:`~specdesk.commands.config` -- the ``config`` sub-command group.
"""
