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

import unittest

from mock import create_autospec, patch

from australis.client.api import SchedulerAPI
from australis.client.api.leader import LeaderResolver
from australis.client.api.mesos_agent import MesosAgentClient
from australis.client.cli.client import AustralisCommandLine
from australis.client.cli.context import FetchCommandContext, add_api_error_handler


class FakeTask(object):
  """Stands in for a scheduled task returned by a scheduler client."""

  def __init__(self, role, env, name, instance, status='RUNNING'):
    self.role = role
    self.env = env
    self.name = name
    self.instance = instance
    self.status = status

  def to_dict(self):
    return {'role': self.role, 'environment': self.env, 'jobName': self.name,
            'instanceId': self.instance, 'status': self.status}

  def __str__(self):
    return '%s/%s/%s/%s %s' % (self.role, self.env, self.name, self.instance, self.status)


class FakeCommandContext(FetchCommandContext):
  def __init__(self):
    super(FakeCommandContext, self).__init__()
    self.fake_api = create_autospec(spec=SchedulerAPI, instance=True)
    self.fake_resolver = create_autospec(spec=LeaderResolver, instance=True)
    self.fake_agent = create_autospec(spec=MesosAgentClient, instance=True)
    self.out = []
    self.err = []

  def get_api(self):
    return add_api_error_handler(self.fake_api)

  def get_leader_resolver(self):
    return self.fake_resolver

  def get_agent_client(self):
    return self.fake_agent

  def print_out(self, msg, indent=0):
    indent_str = " " * indent
    self.out.append("%s%s" % (indent_str, msg))

  def print_err(self, msg, indent=0):
    indent_str = " " * indent
    self.err.append("%s%s" % (indent_str, msg))

  def get_out(self):
    return self.out

  def get_out_str(self):
    return '\n'.join(self.out)

  def get_err(self):
    return self.err


class FakeCommandLine(AustralisCommandLine):
  def __init__(self):
    super(FakeCommandLine, self).__init__()
    self.__err = []

  def print_err(self, s, indent=0):
    indent_str = " " * indent
    self.__err.append("%s%s" % (indent_str, s))

  def get_err(self):
    return self.__err


class AustralisCommandTest(unittest.TestCase):
  @classmethod
  def create_tasks(cls, count=2):
    return [FakeTask('www-data', 'prod', 'hello', i) for i in range(count)]

  def run_command(self, args, context=None):
    """Run a command line against a fake context; returns (result, context, cmd)."""
    context = context or FakeCommandContext()
    with patch('australis.client.cli.fetch.Fetch.create_context', return_value=context):
      cmd = FakeCommandLine()
      result = cmd.execute(args)
    return result, context, cmd
