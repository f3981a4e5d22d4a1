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

import argparse

from australis.client.api.leader import DEFAULT_MESOS_ZK_PATH, DEFAULT_SCHEDULER_ZK_PATH


class CommandOption(object):
  """A lightweight encapsulation of an argparse option specification"""

  def __init__(self, *args, **kwargs):
    # The name is the first double-dashed option name, or the first positional name.
    for arg in args:
      if arg.startswith('--') or not arg.startswith('-'):
        self.name = arg
        break
    else:
      raise ValueError('CommandOption had no valid name.')
    self.args = args[:]
    self.kwargs = kwargs.copy()
    self.type = self.kwargs.get('type')
    self.help = self.kwargs.get('help', '')

  def add_to_parser(self, parser, suppress_default=False):
    """Add this option to an option parser"""
    kwargs = self.kwargs.copy()
    if suppress_default:
      kwargs['default'] = argparse.SUPPRESS
    parser.add_argument(*self.args, **kwargs)


CLUSTER_OPTION = CommandOption('--cluster', default=None, metavar='CLUSTER',
    help='Name of the cluster, as defined in clusters.json, whose scheduler should be queried')


ENVIRONMENT_OPTION = CommandOption('--environment', '-e', default='', metavar='ENV',
    help='Aurora environment; omit to match every environment')


HOSTS_ARGUMENT = CommandOption('hosts', nargs='*', metavar='HOST',
    help='Agent host names to retrieve the maintenance status of')


JOBS_ROLE_OPTION = CommandOption('--role', '-r', default='', metavar='ROLE',
    help="Aurora role whose jobs are listed (required); pass '*' to list the jobs of every role")


JSON_WRITE_OPTION = CommandOption('--write-json', '--toJSON', '-j', default=False,
    dest='write_json', action='store_true',
    help='Generate command output in JSON format')


MESOS_ZK_PATH_OPTION = CommandOption('--zkPath', '--zk-path', dest='zk_path',
    default=DEFAULT_MESOS_ZK_PATH, metavar='PATH',
    help='Zookeeper node path where Mesos leader election happens')


NAME_OPTION = CommandOption('--name', '-n', default='', metavar='NAME',
    help='Aurora job name; omit to match every job')


ROLE_OPTION = CommandOption('--role', '-r', default='', metavar='ROLE',
    help='Aurora role; omit to match every role')


SCHEDULER_URI_OPTION = CommandOption('--scheduler-uri', dest='scheduler_uri', default=None,
    metavar='URI', help='Address of the Aurora scheduler, used instead of a named cluster')


SCHEDULER_ZK_PATH_OPTION = CommandOption('--zkPath', '--zk-path', dest='zk_path',
    default=DEFAULT_SCHEDULER_ZK_PATH, metavar='PATH',
    help='Zookeeper node path where leader election happens')


VERBOSE_OPTION = CommandOption('--verbose', '-v', default=False, action='store_true',
    help='Show verbose output')


ZK_NODES_ARGUMENT = CommandOption('zk_nodes', nargs='*', metavar='ZKNODE',
    help='Zookeeper node addresses, separated by spaces')
