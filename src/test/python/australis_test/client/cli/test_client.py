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

import json
import logging
import sys
from argparse import Namespace

import pytest
from mock import patch

from australis.client.api import SchedulerAPI
from australis.client.cli import (
    EXIT_INTERRUPTED,
    EXIT_INVALID_CONFIGURATION,
    EXIT_OK,
    EXIT_UNKNOWN_ERROR,
    ConfigurationPlugin
)
from australis.client.cli.client import AustralisLogConfigurationPlugin, proxy_main
from australis.client.cli.fetch import JobsCommand
from australis.client.cli.options import CommandOption

from .util import AustralisCommandTest, FakeCommandContext, FakeCommandLine


class FailingPlugin(ConfigurationPlugin):
  def get_options(self):
    return []

  def before_dispatch(self, raw_args):
    raise self.Error('clusters.json is unreadable', code=EXIT_INVALID_CONFIGURATION)

  def before_execution(self, context):
    pass

  def after_execution(self, context, result_code):
    pass


class TestCommandOption(object):
  def test_name(self):
    assert CommandOption('--write-json', '--toJSON', '-j').name == '--write-json'
    assert CommandOption('-e', '--environment').name == '--environment'
    assert CommandOption('hosts', nargs='*').name == 'hosts'

  def test_no_name(self):
    with pytest.raises(ValueError):
      CommandOption('-e')


class TestCommandLine(AustralisCommandTest):
  def test_registered_nouns(self):
    assert list(FakeCommandLine().registered_nouns) == ['fetch']

  def test_version(self):
    with pytest.raises(SystemExit) as e:
      FakeCommandLine().execute(['--version'])
    assert e.value.code == 0

  def test_missing_subcommand(self):
    with pytest.raises(SystemExit) as e:
      self.run_command(['fetch', 'task'])
    assert e.value.code == 2

  def test_common_options_on_every_leaf(self):
    context = FakeCommandContext()
    context.fake_api.get_jobs.return_value = []

    result, context, _ = self.run_command(
        ['fetch', 'jobs', '-r', 'www-data', '-v', '--cluster', 'west',
         '--scheduler-uri', 'http://localhost:8081'], context)

    assert result == EXIT_OK
    assert context.options.verbose
    assert context.options.cluster == 'west'
    assert context.options.scheduler_uri == 'http://localhost:8081'
    assert context.options.write_json is False

  def test_unexpected_error(self):
    context = FakeCommandContext()
    context.fake_api.get_jobs.side_effect = RuntimeError('boom')

    result, _, cmd = self.run_command(['fetch', 'jobs', '-r', 'www-data'], context)

    assert result == EXIT_UNKNOWN_ERROR
    assert cmd.get_err()[0] == 'Fatal error running command:'
    assert 'RuntimeError: boom' in cmd.get_err()[1]

  def test_interrupted(self):
    context = FakeCommandContext()
    context.fake_api.get_jobs.side_effect = KeyboardInterrupt()

    result, _, _ = self.run_command(['fetch', 'jobs', '-r', 'www-data'], context)

    assert result == EXIT_INTERRUPTED

  def test_api_error_message(self):
    context = FakeCommandContext()
    context.fake_api.get_jobs.side_effect = SchedulerAPI.Error('timed out')

    _, _, cmd = self.run_command(['fetch', 'jobs', '-r', 'www-data'], context)

    assert cmd.get_err() == ['Error executing command: error: timed out']

  def test_json_flag_before_noun(self):
    context = FakeCommandContext()
    context.fake_api.get_jobs.return_value = [{'key': 'www-data/prod/hello'}]

    result, context, _ = self.run_command(['--toJSON', 'fetch', 'jobs', '-r', 'www-data'], context)

    assert result == EXIT_OK
    assert json.loads(context.get_out_str()) == [{'key': 'www-data/prod/hello'}]

  def test_json_flag_after_noun(self):
    context = FakeCommandContext()
    context.fake_api.get_jobs.return_value = [{'key': 'www-data/prod/hello'}]

    result, context, _ = self.run_command(['fetch', '-j', 'jobs', '-r', 'www-data'], context)

    assert result == EXIT_OK
    assert json.loads(context.get_out_str()) == [{'key': 'www-data/prod/hello'}]

  def test_json_flag_inside_verb_group(self):
    context = FakeCommandContext()
    context.fake_api.get_task_status.return_value = self.create_tasks()

    result, context, _ = self.run_command(['fetch', 'task', '--write-json', 'status'], context)

    assert result == EXIT_OK
    assert len(json.loads(context.get_out_str())) == 2

  def test_global_options_default_when_absent(self):
    context = FakeCommandContext()
    context.fake_api.get_jobs.return_value = []

    _, context, _ = self.run_command(['fetch', 'jobs', '-r', 'www-data'], context)

    assert context.options.write_json is False
    assert context.options.verbose is False
    assert context.options.cluster is None
    assert context.options.scheduler_uri is None

  def test_jobs_role_help(self):
    help_text = JobsCommand().get_options()[0].help
    assert 'required' in help_text
    assert "'*'" in help_text

  def test_plugin_error_before_dispatch(self):
    cmd = FakeCommandLine()
    cmd.register_plugin(FailingPlugin())

    with patch('australis.client.cli.fetch.Fetch.create_context') as mock_create_context:
      result = cmd.execute(['fetch', 'jobs', '-r', 'www-data'])

    assert result == EXIT_INVALID_CONFIGURATION
    assert cmd.get_err() == [
        'Error in configuration plugin before dispatch: clusters.json is unreadable']
    assert mock_create_context.call_count == 0


class TestLogConfigurationPlugin(object):
  def teardown_method(self, method):
    root_logger = logging.getLogger()
    root_logger.removeHandler(AustralisLogConfigurationPlugin._handler)
    AustralisLogConfigurationPlugin._handler = None
    root_logger.setLevel(logging.WARNING)

  def test_default_level(self):
    plugin = AustralisLogConfigurationPlugin()
    assert plugin.before_dispatch(['fetch', 'leader', 'zk1']) == ['fetch', 'leader', 'zk1']
    assert logging.getLogger().level == logging.INFO
    assert logging.getLogger('kazoo').level == logging.CRITICAL

  def test_verbose(self):
    plugin = AustralisLogConfigurationPlugin()
    plugin.before_dispatch(['fetch', 'leader', 'zk1', '--verbose'])
    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger('kazoo').level == logging.DEBUG

  def test_handler_replaced(self):
    plugin = AustralisLogConfigurationPlugin()
    plugin.before_dispatch([])
    first = AustralisLogConfigurationPlugin._handler
    plugin.before_dispatch(['-v'])
    second = AustralisLogConfigurationPlugin._handler

    handlers = logging.getLogger().handlers
    assert first is not second
    assert first not in handlers
    assert second in handlers

  def test_arguments_after_double_dash_are_ignored(self):
    plugin = AustralisLogConfigurationPlugin()
    plugin.before_dispatch(['fetch', 'leader', '--', '-v'])
    assert logging.getLogger().level == logging.INFO

  def test_parsed_options_decide_level(self):
    plugin = AustralisLogConfigurationPlugin()
    context = FakeCommandContext()

    plugin.before_dispatch(['fetch', 'leader', '-v'])
    context.set_options(Namespace(verbose=False))
    plugin.before_execution(context)
    assert logging.getLogger().level == logging.INFO

    context.set_options(Namespace(verbose=True))
    plugin.before_execution(context)
    assert logging.getLogger().level == logging.DEBUG
    assert len([h for h in logging.getLogger().handlers
        if h is AustralisLogConfigurationPlugin._handler]) == 1


def test_proxy_main_defaults_to_help():
  with patch.object(sys, 'argv', ['australis']):
    with patch('australis.client.cli.client.AustralisCommandLine.execute',
               return_value=EXIT_OK) as mock_execute:
      with pytest.raises(SystemExit) as e:
        proxy_main()
  assert e.value.code == EXIT_OK
  mock_execute.assert_called_once_with(['-h'])
