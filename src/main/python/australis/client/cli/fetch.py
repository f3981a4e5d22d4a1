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

"""Implementation of the Fetch noun: read-only queries against Aurora and Mesos."""

import logging
import textwrap

from australis.client.api import LIVE_STATES, build_query
from australis.client.api.mesos_agent import MesosAgentClient
from australis.client.cli import (
    EXIT_INVALID_PARAMETER,
    EXIT_OK,
    Noun,
    Verb,
    VerbGroup
)
from australis.client.cli.context import FetchCommandContext
from australis.client.cli.options import (
    ENVIRONMENT_OPTION,
    HOSTS_ARGUMENT,
    MESOS_ZK_PATH_OPTION,
    NAME_OPTION,
    JOBS_ROLE_OPTION,
    ROLE_OPTION,
    SCHEDULER_ZK_PATH_OPTION,
    ZK_NODES_ARGUMENT
)

WILDCARD_ROLE = '*'


def query_from_options(options, statuses=None):
  return build_query(
      environment=options.environment,
      role=options.role,
      name=options.name,
      statuses=statuses)


class TaskConfigCommand(Verb):
  @property
  def name(self):
    return 'config'

  @property
  def help(self):
    return 'Fetch a list of task configurations from Aurora.'

  def get_options(self):
    return [ENVIRONMENT_OPTION, ROLE_OPTION, NAME_OPTION]

  def execute(self, context):
    options = context.options
    logging.info('Fetching job configuration for [%s/%s/%s]',
        options.environment, options.role, options.name)
    api = context.get_api()
    tasks = api.get_tasks_without_configs(query_from_options(options))
    context.print_results(tasks)
    return EXIT_OK


class TaskStatusCommand(Verb):
  @property
  def name(self):
    return 'status'

  @property
  def help(self):
    return 'Fetch the status of live tasks matching an environment, role and job name.'

  def get_options(self):
    return [ENVIRONMENT_OPTION, ROLE_OPTION, NAME_OPTION]

  def execute(self, context):
    options = context.options
    logging.info('Fetching task status for [%s/%s/%s]',
        options.environment, options.role, options.name)
    api = context.get_api()
    tasks = api.get_task_status(query_from_options(options, statuses=LIVE_STATES))
    context.print_results(tasks)
    return EXIT_OK


class TaskCommand(VerbGroup):
  @property
  def name(self):
    return 'task'

  @property
  def help(self):
    return 'Task information from Aurora'

  def __init__(self):
    super(TaskCommand, self).__init__()
    self.register_verb(TaskConfigCommand())
    self.register_verb(TaskStatusCommand())


class JobsCommand(Verb):
  @property
  def name(self):
    return 'jobs'

  @property
  def help(self):
    return textwrap.dedent("""\
        Fetch the configurations of the jobs running under a role.
        Pass '*' as the role to list the jobs of every role.""")

  def get_options(self):
    return [JOBS_ROLE_OPTION]

  def execute(self, context):
    role = context.options.role
    logging.info('Fetching jobs under role: %s', role)
    if not role:
      raise context.CommandError(EXIT_INVALID_PARAMETER, 'Role must be specified.')
    if role == WILDCARD_ROLE:
      logging.warning('This is an expensive operation.')
      role = None
    configs = context.get_api().get_jobs(role)
    context.print_results(configs)
    return EXIT_OK


class HostStatusCommand(Verb):
  @property
  def name(self):
    return 'status'

  @property
  def help(self):
    return textwrap.dedent("""\
        Fetch the maintenance status of Mesos agent hosts from Aurora.
        Pass host names separated by spaces.""")

  def get_options(self):
    return [HOSTS_ARGUMENT]

  def execute(self, context):
    hosts = context.options.hosts
    if not hosts:
      raise context.CommandError(EXIT_INVALID_PARAMETER, 'At least one host must be passed in.')
    logging.info('Fetching maintenance status for %s', hosts)
    statuses = context.get_api().maintenance_status(hosts)
    context.print_results(statuses, render=lambda status: 'Result: %s' % (status,))
    return EXIT_OK


class LeaderCommand(Verb):
  @property
  def name(self):
    return 'leader'

  @property
  def help(self):
    return textwrap.dedent("""\
        Fetch the current Aurora leader given Zookeeper nodes.
        Pass Zookeeper nodes separated by a space as arguments to this command.""")

  def get_options(self):
    return [ZK_NODES_ARGUMENT, SCHEDULER_ZK_PATH_OPTION]

  def execute(self, context):
    endpoints = context.options.zk_nodes
    logging.info('Fetching leader from %s', endpoints)
    if not endpoints:
      raise context.CommandError(EXIT_INVALID_PARAMETER,
          'At least one Zookeeper node address must be passed in.')
    url = context.resolve_leader('leader', endpoints, context.options.zk_path)
    context.print_out(url)
    return EXIT_OK


class MesosLeaderCommand(Verb):
  FALLBACK_ZK_NODE = 'localhost'

  @property
  def name(self):
    return 'leader'

  @property
  def help(self):
    return textwrap.dedent("""\
        Fetch the current Mesos-master leader given Zookeeper nodes.
        If no nodes are passed, the leader is looked up through the local Mesos agent,
        falling back to a Zookeeper node on localhost.""")

  def get_options(self):
    return [ZK_NODES_ARGUMENT, MESOS_ZK_PATH_OPTION]

  def execute(self, context):
    endpoints = list(context.options.zk_nodes)
    if not endpoints:
      agent = context.get_agent_client()
      try:
        flags = agent.fetch_flags()
      except MesosAgentClient.Error as e:
        logging.debug('Unable to fetch Mesos leader via local Mesos agent: %s', e)
        flags = None
      if flags is None or not flags.master:
        endpoints = [self.FALLBACK_ZK_NODE]
      elif flags.has_master:
        context.print_out(flags.master)
        return EXIT_OK
      else:
        endpoints = flags.zk_nodes
    logging.info('Fetching Mesos-master leader from Zookeeper node(s): %s', endpoints)
    url = context.resolve_leader('mesos_leader', endpoints, context.options.zk_path)
    context.print_out(url)
    return EXIT_OK


class MesosCommand(VerbGroup):
  @property
  def name(self):
    return 'mesos'

  @property
  def help(self):
    return 'Fetch information from Mesos.'

  def __init__(self):
    super(MesosCommand, self).__init__()
    self.register_verb(MesosLeaderCommand())


class Fetch(Noun):
  @property
  def name(self):
    return 'fetch'

  @property
  def help(self):
    return 'Fetch information from Aurora'

  @classmethod
  def create_context(cls):
    return FetchCommandContext()

  def __init__(self):
    super(Fetch, self).__init__()
    self.register_verb(TaskCommand())
    self.register_verb(LeaderCommand())
    self.register_verb(MesosCommand())
    self.register_verb(JobsCommand())
    self.register_verb(HostStatusCommand())
