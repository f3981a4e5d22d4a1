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

"""Discovery of the Mesos master through the state endpoint of the local agent.

An agent is started with a --master flag in one of these forms:

  host:port
  zk://host1:port1,host2:port2,.../path
  zk://username:password@host1:port1,host2:port2,.../path
  file:///path/to/file

The agent reports that flag back on its /state endpoint, which lets a client running on an
agent host find either the master itself or the ZooKeeper ensemble the masters use.
"""

import logging

import requests

log = logging.getLogger(__name__)

LOCAL_AGENT_STATE_URL = 'http://127.0.0.1:5051/state'

ZK_PREFIX = 'zk://'
FILE_PREFIX = 'file://'


class AgentFlags(object):
  """The agent's master flag, normalized.

  has_master is True when master is a direct address of a Mesos master, and False when it is
  a comma-separated list of ZooKeeper nodes that still has to be resolved.
  """

  def __init__(self, master='', has_master=False):
    self.master = master
    self.has_master = has_master

  @property
  def zk_nodes(self):
    if self.has_master or not self.master:
      return []
    return self.master.split(',')

  def __eq__(self, other):
    return (isinstance(other, AgentFlags) and
        (self.master, self.has_master) == (other.master, other.has_master))

  def __ne__(self, other):
    return not self == other

  def __repr__(self):
    return 'AgentFlags(master=%r, has_master=%r)' % (self.master, self.has_master)


class MesosAgentClient(object):
  class Error(Exception): pass
  class StateUnavailable(Error): pass
  class InvalidMasterFileContent(Error): pass

  DEFAULT_TIMEOUT_SECS = 5

  def __init__(self, url=LOCAL_AGENT_STATE_URL, timeout=DEFAULT_TIMEOUT_SECS, session=None):
    self._url = url
    self._timeout = timeout
    self._session = session or requests.Session()

  @property
  def url(self):
    return self._url

  def fetch_state(self):
    try:
      response = self._session.get(self._url, timeout=self._timeout)
    except requests.RequestException as e:
      raise self.StateUnavailable('Unable to reach Mesos agent at %s: %s' % (self._url, e))
    with response:
      if response.status_code != requests.codes.ok:
        raise self.StateUnavailable('Mesos agent at %s returned HTTP %s' % (
            self._url, response.status_code))
      try:
        state = response.json()
      except ValueError as e:
        raise self.StateUnavailable('Unable to decode agent state from %s: %s' % (self._url, e))
    if not isinstance(state, dict):
      raise self.StateUnavailable('Unexpected agent state document from %s' % self._url)
    return state

  def fetch_flags(self):
    """Fetch the agent state and return its normalized master flag."""
    flags = self.fetch_state().get('flags') or {}
    master = flags.get('master') or ''
    log.debug('Mesos agent reports master flag: %s' % master)
    return parse_master_flag(master)


def parse_master_flag(master):
  """Normalize the value of an agent's --master flag into AgentFlags.

  A file:// value is replaced by the file's content and normalized once more; content that
  points at yet another file is rejected.
  """
  if master.startswith(ZK_PREFIX):
    begin = len(ZK_PREFIX)
    if '@' in master:
      begin = master.index('@') + 1
    end = master.rfind('/')
    if end < begin:
      end = len(master)
    return AgentFlags(master[begin:end])
  elif master.startswith(FILE_PREFIX):
    filename = master[len(FILE_PREFIX):]
    try:
      with open(filename) as fp:
        content = fp.read().strip()
    except (IOError, OSError) as e:
      raise MesosAgentClient.StateUnavailable('Unable to read master file %s: %s' % (filename, e))
    if FILE_PREFIX in content:
      raise MesosAgentClient.InvalidMasterFileContent('invalid master file content')
    return parse_master_flag(content)
  return AgentFlags(master, has_master=True)
