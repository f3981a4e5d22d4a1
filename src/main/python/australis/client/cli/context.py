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

import functools

from australis.client.api import SchedulerAPI
from australis.client.api.leader import LeaderResolver, ZookeeperLeaderResolver
from australis.client.api.mesos_agent import MesosAgentClient
from australis.client.base import to_json
from australis.client.cli import (
    EXIT_API_ERROR,
    EXIT_INVALID_CONFIGURATION,
    EXIT_NETWORK_ERROR,
    Context
)
from australis.client.factory import ClientFactoryError, make_api
from australis.common.cluster import Cluster
from australis.common.clusters import CLUSTERS, Clusters

ADHOC_CLUSTER_NAME = 'australis'


class ErrorHandlingSchedulerAPI(object):
  """Wraps a SchedulerAPI so that its failures terminate the command with EXIT_API_ERROR."""

  def __init__(self, delegate):
    self._delegate = delegate

  def __getattr__(self, method_name):
    try:
      method = getattr(SchedulerAPI, method_name)
    except AttributeError:
      # Don't interfere with the non-public API.
      return getattr(self._delegate, method_name)
    if method_name.startswith('_') or not callable(method):
      return getattr(self._delegate, method_name)

    @functools.wraps(method)
    def method_wrapper(*args, **kwargs):
      try:
        return getattr(self._delegate, method_name)(*args, **kwargs)
      except SchedulerAPI.Error as e:
        raise Context.CommandError(EXIT_API_ERROR, 'error: %s' % e)

    return method_wrapper


def add_api_error_handler(api):
  return ErrorHandlingSchedulerAPI(api)


class FetchCommandContext(Context):
  """Context for the read-only fetch commands.

  Collaborators are created lazily, so commands that never talk to the scheduler (the leader
  lookups) work without any scheduler client installed.
  """

  def __init__(self, clusters=CLUSTERS):
    super(FetchCommandContext, self).__init__()
    self._clusters = clusters
    self._api = None

  def get_cluster(self):
    scheduler_uri = getattr(self.options, 'scheduler_uri', None)
    cluster_name = getattr(self.options, 'cluster', None)
    if scheduler_uri:
      return Cluster(name=cluster_name or ADHOC_CLUSTER_NAME, scheduler_uri=scheduler_uri)
    if cluster_name:
      try:
        return self._clusters[cluster_name]
      except Clusters.ClusterNotFound as e:
        raise self.CommandError(EXIT_INVALID_CONFIGURATION, str(e.args[0]))
    if len(self._clusters) == 1:
      return self._clusters[list(self._clusters)[0]]
    raise self.CommandError(EXIT_INVALID_CONFIGURATION,
        'A scheduler must be selected with --cluster or --scheduler-uri')

  def get_api(self):
    """Gets the scheduler API for the selected cluster, creating it on first use."""
    if self._api is None:
      cluster = self.get_cluster()
      try:
        self._api = make_api(cluster)
      except ClientFactoryError as e:
        raise self.CommandError(EXIT_INVALID_CONFIGURATION, str(e))
    return add_api_error_handler(self._api)

  def get_leader_resolver(self):
    return ZookeeperLeaderResolver()

  def get_agent_client(self):
    return MesosAgentClient()

  def resolve_leader(self, method_name, endpoints, path):
    resolver = self.get_leader_resolver()
    try:
      return getattr(resolver, method_name)(endpoints, path)
    except LeaderResolver.Error as e:
      raise self.CommandError(EXIT_NETWORK_ERROR, 'error: %s' % e)

  def print_results(self, results, render=str):
    """Print results one per line, or as a single JSON array when --write-json is set."""
    results = list(results)
    if getattr(self.options, 'write_json', False):
      self.print_out(to_json(results))
    else:
      for result in results:
        self.print_out(render(result))
