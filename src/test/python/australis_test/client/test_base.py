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

from mock import patch

from australis.client.api import HostStatus, TaskQuery
from australis.client.base import is_thrift_struct, jsonable, to_json


class FakeThriftStruct(object):
  thrift_spec = (None, (1, 11, 'host', None, None))

  def __init__(self, host=None):
    self.host = host


def test_is_thrift_struct():
  assert is_thrift_struct(FakeThriftStruct('west-agent-1'))
  assert not is_thrift_struct(FakeThriftStruct)
  assert not is_thrift_struct({'host': 'west-agent-1'})


def test_jsonable_thrift_struct():
  with patch('australis.client.base.serialize', return_value=b'{"host":"west-agent-1"}') as mock:
    assert jsonable(FakeThriftStruct('west-agent-1')) == {'host': 'west-agent-1'}
  assert mock.call_count == 1


def test_jsonable_values():
  assert jsonable(HostStatus('west-agent-1', 'DRAINED')) == {
      'host': 'west-agent-1', 'mode': 'DRAINED'}
  assert jsonable(TaskQuery(role='www-data', statuses=['RUNNING', 'KILLING'])) == {
      'role': 'www-data', 'statuses': ['KILLING', 'RUNNING']}
  assert jsonable(frozenset(['b', 'a'])) == ['a', 'b']
  assert jsonable({1: ('x', 'y')}) == {'1': ['x', 'y']}
  assert jsonable('plain') == 'plain'


def test_to_json():
  rendered = to_json([HostStatus('west-agent-1', 'NONE')])
  assert rendered == '[\n  {\n    "host": "west-agent-1",\n    "mode": "NONE"\n  }\n]'
  assert json.loads(to_json([object()]))[0].startswith('<object object')
