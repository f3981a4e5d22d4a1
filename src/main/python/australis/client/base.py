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
from collections.abc import Mapping

from thrift.protocol import TJSONProtocol
from thrift.TSerialization import serialize


def is_thrift_struct(value):
  return getattr(value, 'thrift_spec', None) is not None and not isinstance(value, type)


def jsonable(value):
  """Convert a scheduler result into plain JSON-compatible data.

  Thrift structs go through thrift's simple JSON protocol, so enum fields stay numeric and
  field names match the scheduler's IDL.
  """
  if is_thrift_struct(value):
    return json.loads(serialize(value,
        protocol_factory=TJSONProtocol.TSimpleJSONProtocolFactory()))
  if hasattr(value, '_asdict'):
    return dict((k, jsonable(v)) for k, v in value._asdict().items())
  if isinstance(value, Mapping):
    return dict((str(k), jsonable(v)) for k, v in value.items())
  if isinstance(value, (set, frozenset)):
    return [jsonable(v) for v in sorted(value, key=str)]
  if isinstance(value, (list, tuple)):
    return [jsonable(v) for v in value]
  if hasattr(value, 'to_dict'):
    return jsonable(value.to_dict())
  return value


def to_json(value):
  return json.dumps(jsonable(value), indent=2, separators=(',', ': '), sort_keys=False,
      default=str)
