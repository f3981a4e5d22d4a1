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

"""Leader lookup for Aurora schedulers and Mesos masters.

Both publish their leader in ZooKeeper; this module only reads what they publish.

Aurora schedulers announce themselves as a serverset under the scheduler path, one
"member_<seq>" znode per leading instance, holding a JSON ServiceInstance:

  {"serviceEndpoint": {"host": "...", "port": 8081},
   "additionalEndpoints": {"http": {"host": "...", "port": 8081}},
   "status": "ALIVE"}

Mesos masters contend under the Mesos path with "json.info_<seq>" znodes holding a JSON
MasterInfo; the lowest sequence number is the leader.
"""

import json
import logging
import posixpath
from abc import ABCMeta, abstractmethod

from kazoo.client import KazooClient
from kazoo.exceptions import KazooException, NoNodeError
from kazoo.handlers.threading import KazooTimeoutError

log = logging.getLogger(__name__)

DEFAULT_ZK_PORT = 2181
DEFAULT_SCHEDULER_ZK_PATH = '/aurora/scheduler'
DEFAULT_MESOS_ZK_PATH = '/mesos'

SCHEDULER_MEMBER_PREFIX = 'member_'
MESOS_MEMBER_PREFIX = 'json.info_'


class LeaderResolver(metaclass=ABCMeta):
  class Error(Exception): pass

  @abstractmethod
  def leader(self, endpoints, path=DEFAULT_SCHEDULER_ZK_PATH):
    """Return the URL of the leading Aurora scheduler."""

  @abstractmethod
  def mesos_leader(self, endpoints, path=DEFAULT_MESOS_ZK_PATH):
    """Return the host:port of the leading Mesos master."""


def zk_ensemble(endpoints, default_port=DEFAULT_ZK_PORT):
  """Join ZooKeeper node addresses into a connection string, adding the default port."""
  hosts = []
  for endpoint in endpoints:
    for node in endpoint.split(','):
      node = node.strip()
      if not node:
        continue
      hosts.append(node if ':' in node else '%s:%d' % (node, default_port))
  return ','.join(hosts)


def member_sequence(name, prefix):
  try:
    return int(name[len(prefix):])
  except ValueError:
    return None


def sorted_members(children, prefix):
  """Children carrying prefix, ordered by their sequence number."""
  members = []
  for child in children:
    if not child.startswith(prefix):
      continue
    sequence = member_sequence(child, prefix)
    if sequence is not None:
      members.append((sequence, child))
  return [child for _, child in sorted(members)]


def scheduler_url_from_member(data):
  """Extract the scheduler URL from a serverset member, preferring https over http."""
  instance = json.loads(data)
  additional = instance.get('additionalEndpoints') or {}
  for scheme in ('https', 'http'):
    if scheme in additional:
      endpoint = additional[scheme]
      return '%s://%s:%s' % (scheme, endpoint['host'], endpoint['port'])
  raise ValueError('serverset member has no http or https endpoint')


def mesos_address_from_member(data):
  info = json.loads(data)
  address = info.get('address') or {}
  host = address.get('hostname') or address.get('ip') or info.get('hostname')
  port = address.get('port') or info.get('port')
  if not host or not port:
    raise ValueError('master info has no address')
  return '%s:%s' % (host, port)


class ZookeeperLeaderResolver(LeaderResolver):
  DEFAULT_TIMEOUT_SECS = 10.0

  def __init__(self, timeout=DEFAULT_TIMEOUT_SECS, client_factory=KazooClient):
    self._timeout = timeout
    self._client_factory = client_factory

  def _with_zk(self, endpoints, path, fn):
    if not endpoints:
      raise self.Error('At least one Zookeeper node address is required.')
    ensemble = zk_ensemble(endpoints)
    log.debug('Connecting to Zookeeper ensemble %s' % ensemble)
    zk = self._client_factory(hosts=ensemble, timeout=self._timeout, read_only=True)
    try:
      try:
        zk.start(timeout=self._timeout)
      except KazooTimeoutError:
        raise self.Error('Failed to connect to Zookeeper at %s within %d seconds.' % (
            ensemble, self._timeout))
      return fn(zk)
    except NoNodeError:
      raise self.Error('Path %s does not exist in Zookeeper at %s' % (path, ensemble))
    except (KazooException, KazooTimeoutError) as e:
      raise self.Error('Error reading %s from Zookeeper at %s: %s' % (path, ensemble, e))
    finally:
      zk.stop()
      zk.close()

  def leader(self, endpoints, path=DEFAULT_SCHEDULER_ZK_PATH):
    def resolve(zk):
      for child in sorted_members(zk.get_children(path), SCHEDULER_MEMBER_PREFIX):
        data, _ = zk.get(posixpath.join(path, child))
        try:
          return scheduler_url_from_member(data)
        except (ValueError, KeyError, TypeError, AttributeError) as e:
          raise self.Error('Bad serverset member %s: %s' % (child, e))
      raise self.Error('No leader found under %s' % path)
    return self._with_zk(endpoints, path, resolve)

  def mesos_leader(self, endpoints, path=DEFAULT_MESOS_ZK_PATH):
    def resolve(zk):
      members = sorted_members(zk.get_children(path), MESOS_MEMBER_PREFIX)
      if not members:
        raise self.Error('No Mesos master found under %s' % path)
      data, _ = zk.get(posixpath.join(path, members[0]))
      try:
        return mesos_address_from_member(data)
      except (ValueError, AttributeError) as e:
        raise self.Error('Bad Mesos master info in %s: %s' % (members[0], e))
    return self._with_zk(endpoints, path, resolve)
