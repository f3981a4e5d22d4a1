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

"""Discovery of scheduler client implementations.

Scheduler clients are provided by other distributions through the
"australis.scheduler_clients" entry point group. Each entry point names a callable that takes
a Cluster and returns a SchedulerClient. A cluster picks its implementation through its
"scheduler_client" attribute.
"""

import logging
from importlib.metadata import entry_points

from australis.client.api import SchedulerAPI, SchedulerClient
from australis.common.clusters import SchedulerClientTrait

log = logging.getLogger(__name__)

ENTRY_POINT_GROUP = 'australis.scheduler_clients'


class ClientFactoryError(Exception): pass


def load_client_factory(name, group=ENTRY_POINT_GROUP):
  matches = [ep for ep in entry_points(group=group) if ep.name == name]
  if not matches:
    raise ClientFactoryError(
        'No scheduler client named %r is installed. Install a package that registers one under '
        'the %r entry point group.' % (name, group))
  return matches[0].load()


def make_scheduler_client(cluster, loader=load_client_factory):
  cluster = cluster.with_trait(SchedulerClientTrait)
  if not (cluster.zk or cluster.scheduler_uri):
    raise ClientFactoryError('Cluster %s does not specify zk or scheduler_uri' % cluster.name)
  log.debug('Using scheduler client %s for cluster %s' % (cluster.scheduler_client, cluster.name))
  factory = loader(cluster.scheduler_client)
  try:
    client = factory(cluster)
  except Exception as e:
    raise ClientFactoryError('Unable to create scheduler client for %s: %s' % (cluster.name, e))
  if not isinstance(client, SchedulerClient):
    raise ClientFactoryError('Scheduler client %r did not produce a SchedulerClient' %
        cluster.scheduler_client)
  return client


def make_api(cluster, loader=load_client_factory):
  return SchedulerAPI(make_scheduler_client(cluster, loader=loader), cluster_name=cluster.name)
