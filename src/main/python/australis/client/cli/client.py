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

import logging
import sys

from australis.client.cli import CommandLine, ConfigurationPlugin
from australis.client.cli.logsetup import setup_default_log_handlers
from australis.client.cli.options import (
    CLUSTER_OPTION,
    JSON_WRITE_OPTION,
    SCHEDULER_URI_OPTION,
    VERBOSE_OPTION
)


class AustralisLogConfigurationPlugin(ConfigurationPlugin):
  """Plugin for configuring log level settings for the australis client."""

  _handler = None

  def get_options(self):
    return [VERBOSE_OPTION]

  def _configure(self, loglevel):
    root_logger = logging.getLogger()
    if AustralisLogConfigurationPlugin._handler is not None:
      root_logger.removeHandler(AustralisLogConfigurationPlugin._handler)
    AustralisLogConfigurationPlugin._handler = setup_default_log_handlers(loglevel)

  def before_dispatch(self, raw_args):
    # The parsed --verbose flag takes over in before_execution.
    loglevel = logging.INFO
    for arg in raw_args:
      if arg == "--":
        break
      if arg == "--verbose" or arg == "-v":
        loglevel = logging.DEBUG
    self._configure(loglevel)
    return raw_args

  def before_execution(self, context):
    verbose = getattr(context.options, "verbose", False)
    self._configure(logging.DEBUG if verbose else logging.INFO)

  def after_execution(self, context, result_code):
    pass


class AustralisOutputPlugin(ConfigurationPlugin):
  """Plugin adding the output format and scheduler selection options to every command."""

  def get_options(self):
    return [JSON_WRITE_OPTION, CLUSTER_OPTION, SCHEDULER_URI_OPTION]

  def before_dispatch(self, raw_args):
    return raw_args

  def before_execution(self, context):
    pass

  def after_execution(self, context, result_code):
    pass


class AustralisCommandLine(CommandLine):
  """The CommandLine implementation for the australis command line."""

  def __init__(self):
    super(AustralisCommandLine, self).__init__()
    self.register_plugin(AustralisLogConfigurationPlugin())
    self.register_plugin(AustralisOutputPlugin())

  @property
  def name(self):
    return 'australis'

  @classmethod
  def get_description(cls):
    return 'Command line client for Apache Aurora'

  def register_nouns(self):
    from australis.client.cli.fetch import Fetch
    self.register_noun(Fetch())


def proxy_main():
  client = AustralisCommandLine()
  # Defaulting to '-h' results in a similar, but more inviting message than 'too few arguments'.
  if len(sys.argv) == 1:
    sys.argv.append('-h')
  sys.exit(client.execute(sys.argv[1:]))


if __name__ == '__main__':
  proxy_main()
