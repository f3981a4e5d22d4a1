#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#

'''Command-line tooling infrastructure for the australis client.

Commands are structured as nouns and verbs: every invocation names a noun, then one of the
verbs registered for that noun, then the verb's arguments. Verbs can themselves be grouped,
which gives the read-only queries their natural shape:

  $ australis fetch task status -r www-data -e prod
  $ australis fetch jobs -r '*'
  $ australis fetch mesos leader
'''

import argparse
import logging
import sys
import traceback
from abc import ABCMeta, abstractmethod

from australis import __version__

# Constants for standard return codes.
EXIT_OK = 0
EXIT_INTERRUPTED = 130
EXIT_INVALID_CONFIGURATION = 3
EXIT_INVALID_PARAMETER = 6
EXIT_NETWORK_ERROR = 7
EXIT_API_ERROR = 10
EXIT_UNKNOWN_ERROR = 20


class Context(object):
  """Request-scoped state handed to every verb: the parsed options plus helpers for output."""

  class Error(Exception): pass

  class CommandError(Error):
    def __init__(self, code, msg):
      super(Context.CommandError, self).__init__(msg)
      self.msg = msg
      self.code = code

  def __init__(self):
    self._options = None
    self.args = None

  @property
  def options(self):
    return self._options

  def set_options(self, options):
    """Add the options object to a context.
    This is separated from the constructor to make patching tests easier.
    """
    self._options = options

  def set_args(self, args):
    self.args = args

  def print_out(self, msg, indent=0):
    """Prints output to standard out with indent.
    For debugging purposes, it's nice to be able to patch this and capture output.
    """
    if not isinstance(msg, str):
      raise TypeError('msg must be a string')
    indent_str = " " * indent
    for line in msg.split("\n"):
      print("%s%s" % (indent_str, line))

  def print_err(self, msg, indent=0):
    indent_str = " " * indent
    for line in msg.split("\n"):
      print("%s%s" % (indent_str, line), file=sys.stderr)


class ConfigurationPlugin(metaclass=ABCMeta):
  """A component that adds options to every command, and runs around each command's execution.

  Logging setup and output selection are plugins, so individual verbs do not have to declare
  those options themselves.
  """

  class Error(Exception):
    def __init__(self, msg, code=0):
      super(ConfigurationPlugin.Error, self).__init__(msg)
      self.code = code
      self.msg = msg

  @abstractmethod
  def get_options(self):
    """Return the list of CommandOptions processed by this plugin."""

  @abstractmethod
  def before_dispatch(self, raw_args):
    """Run before argument parsing; returns the (possibly rewritten) raw arguments.
    Raising ConfigurationPlugin.Error aborts the command.
    """

  @abstractmethod
  def before_execution(self, context):
    """Run with the verb's context, right before the verb executes."""

  @abstractmethod
  def after_execution(self, context, result_code):
    """Run cleanup after the verb has completed. Errors here never change the result."""


class AuroraCommand(metaclass=ABCMeta):
  def setup_options_parser(self, argparser):
    """Sets up command line options parsing for this command.
    This is a thin veneer over the standard python argparse system.
    """
    pass

  @property
  @abstractmethod
  def help(self):
    """Returns the help message for this command"""

  @property
  @abstractmethod
  def name(self):
    """Returns the command name"""


class CommandLine(metaclass=ABCMeta):
  """The top-level object implementing a command-line application."""

  @property
  @abstractmethod
  def name(self):
    """Returns the name of this command-line tool"""

  def print_out(self, s, indent=0):
    indent_str = " " * indent
    print("%s%s" % (indent_str, s))

  def print_err(self, s, indent=0):
    indent_str = " " * indent
    print("%s%s" % (indent_str, s), file=sys.stderr)

  def __init__(self):
    self.nouns = None
    self.parser = None
    self.plugins = []

  def register_noun(self, noun):
    if self.nouns is None:
      self.nouns = {}
    if not isinstance(noun, Noun):
      raise TypeError("register_noun requires a Noun argument")
    self.nouns[noun.name] = noun
    noun.set_commandline(self)

  def register_plugin(self, plugin):
    self.plugins.append(plugin)

  def setup_options_parser(self):
    self.parser = argparse.ArgumentParser(prog=self.name)
    self.parser.add_argument('--version', action='version', version=__version__)
    self.add_common_options(self.parser, suppress_default=False)
    subparser = self.parser.add_subparsers(dest="noun", title='commands')
    subparser.required = True
    for name, noun in self.nouns.items():
      noun_parser = subparser.add_parser(name, help=noun.help)
      noun.internal_setup_options_parser(noun_parser)

  @abstractmethod
  def register_nouns(self):
    """Register the nouns this application can manipulate; called on demand."""

  @property
  def registered_nouns(self):
    if self.nouns is None:
      self.register_nouns()
    return self.nouns.keys()

  def add_common_options(self, argparser, suppress_default=True):
    """Add the options contributed by the plugins, which are accepted at every level of a command.

    Only the top-level copy carries defaults, so a lower level never resets a flag given earlier.
    """
    for plugin in self.plugins:
      for opt in plugin.get_options():
        opt.add_to_parser(argparser, suppress_default=suppress_default)

  def _setup(self, args):
    # Accessing registered_nouns registers them as a side effect.
    nouns = self.registered_nouns  # noqa
    for plugin in self.plugins:
      args = plugin.before_dispatch(args)
    return args

  def _parse_args(self, args):
    self.setup_options_parser()
    options = self.parser.parse_args(args)
    if options.noun not in self.nouns:
      raise ValueError("Unknown command: %s" % options.noun)
    noun = self.nouns[options.noun]
    context = noun.create_context()
    context.set_options(options)
    context.set_args(args)
    return (noun, context)

  def _run_pre_plugins(self, context):
    try:
      for plugin in self.plugins:
        plugin.before_execution(context)
    except ConfigurationPlugin.Error as e:
      self.print_err("Error in configuration plugin before execution: %s" % e.msg)
      return e.code
    return EXIT_OK

  def _run_post_plugins(self, context, result):
    for plugin in self.plugins:
      try:
        plugin.after_execution(context, result)
      except ConfigurationPlugin.Error as e:
        logging.info("Error executing post-execution plugin: %s", e.msg)

  def _execute(self, args):
    """Execute a command.
    :param args: the command-line arguments for the command. This only includes arguments
        that should be parsed by the application; it does not include sys.argv[0].
    """
    try:
      args = self._setup(args)
    except ConfigurationPlugin.Error as e:
      self.print_err("Error in configuration plugin before dispatch: %s" % e.msg)
      return e.code
    noun, context = self._parse_args(args)
    logging.debug("Command=(%s)", args)
    pre_result = self._run_pre_plugins(context)
    if pre_result != EXIT_OK:
      return pre_result
    try:
      result = noun.execute(context)
      assert result is not None, "Command return value is None!"
      if result == EXIT_OK:
        logging.debug("Command terminated successfully")
      else:
        logging.info("Command terminated with error code %s", result)
      self._run_post_plugins(context, result)
      return result
    except Context.CommandError as c:
      self.print_err("Error executing command: %s" % c.msg)
      return c.code
    except Exception:
      self.print_err("Fatal error running command:")
      self.print_err(traceback.format_exc())
      return EXIT_UNKNOWN_ERROR

  def execute(self, args):
    try:
      return self._execute(args)
    except KeyboardInterrupt:
      logging.error("Command interrupted by user")
      return EXIT_INTERRUPTED
    except Exception as e:
      logging.error("Unknown error: %s" % e)
      return EXIT_UNKNOWN_ERROR


class Noun(AuroraCommand):
  """A type of object manipulated by a command line application"""
  class InvalidVerbException(Exception): pass

  def __init__(self):
    super(Noun, self).__init__()
    self.verbs = {}
    self.commandline = None

  def set_commandline(self, commandline):
    self.commandline = commandline

  def register_verb(self, verb):
    """Add an operation supported for this noun."""
    if not isinstance(verb, Verb):
      raise TypeError("register_verb requires a Verb argument")
    self.verbs[verb.name] = verb
    verb._register(self)

  def internal_setup_options_parser(self, argparser):
    """Assemble the options of every verb of this noun into an argparse subparser."""
    self.setup_options_parser(argparser)
    if self.commandline is not None:
      self.commandline.add_common_options(argparser)
    subparser = argparser.add_subparsers(dest="verb", title='subcommands')
    subparser.required = True
    for name, verb in self.verbs.items():
      vparser = subparser.add_parser(name, help=verb.help)
      verb.internal_setup_options_parser(vparser)

  @classmethod
  def create_context(cls):
    """Commands access state through a context object. The noun specifies what kind
    of context should be created for this noun's required state.
    """
    return Context()

  def execute(self, context):
    if context.options.verb not in self.verbs:
      raise self.InvalidVerbException("Command %s does not have subcommand %s" %
          (self.name, context.options.verb))
    return self.verbs[context.options.verb].execute(context)


class Verb(AuroraCommand):
  """An operation for a noun. Most application logic will live in verbs."""

  noun = None

  def _register(self, noun):
    """Create a link from a verb to its noun."""
    self.noun = noun

  def internal_setup_options_parser(self, argparser):
    for opt in self.get_options():
      opt.add_to_parser(argparser)
    if self.noun is not None and self.noun.commandline is not None:
      self.noun.commandline.add_common_options(argparser)

  @abstractmethod
  def get_options(self):
    pass

  @abstractmethod
  def execute(self, context):
    pass


class VerbGroup(Verb):
  """A verb whose work is done by one of several sub-verbs, e.g. "task" in "fetch task status"."""

  def __init__(self):
    super(VerbGroup, self).__init__()
    self.verbs = {}

  def register_verb(self, verb):
    if not isinstance(verb, Verb) or isinstance(verb, VerbGroup):
      raise TypeError("register_verb requires a Verb argument")
    self.verbs[verb.name] = verb
    if self.noun is not None:
      verb._register(self.noun)

  def _register(self, noun):
    super(VerbGroup, self)._register(noun)
    for verb in self.verbs.values():
      verb._register(noun)

  def get_options(self):
    return []

  def internal_setup_options_parser(self, argparser):
    if self.noun is not None and self.noun.commandline is not None:
      self.noun.commandline.add_common_options(argparser)
    subparser = argparser.add_subparsers(dest="subverb", title='subcommands')
    subparser.required = True
    for name, verb in self.verbs.items():
      vparser = subparser.add_parser(name, help=verb.help)
      verb.internal_setup_options_parser(vparser)

  def execute(self, context):
    subverb = getattr(context.options, 'subverb', None)
    if subverb not in self.verbs:
      raise Noun.InvalidVerbException("Command %s does not have subcommand %s" %
          (self.name, subverb))
    return self.verbs[subverb].execute(context)
