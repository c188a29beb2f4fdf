# coding: utf-8
"""
soap.py

Access to Soaplab analysis services over SOAP 1.1 (rpc/encoded), posted with requests.

Each analysis has its own endpoint <location>/<analysis name>. Job ids start with the analysis name
("edit::seqret/c8ef56:ef535489ac:-7ff4"), which is how job operations find their endpoint.

Copyright (c) 2015-2024, Evgeny Zdobnov (ez@ezlab.org). All rights reserved.

License: Licensed under the MIT license. See LICENSE.md file.

"""

import base64
import xml.etree.ElementTree as ET
import requests

from biorun.access import register_access_protocol
from biorun.access.base import AccessProtocol, JobStatus
from biorun.AnalysisLogger import AnalysisLogger
from biorun.AnalysisLogger import LogDecorator as log
from biorun.Exceptions import TransportError

logger = AnalysisLogger.get_logger(__name__)

SOAP_ENV = "http://schemas.xmlsoap.org/soap/envelope/"
SOAP_ENC = "http://schemas.xmlsoap.org/soap/encoding/"
XSI = "http://www.w3.org/2001/XMLSchema-instance"
XSD = "http://www.w3.org/2001/XMLSchema"
APACHE_SOAP = "http://xml.apache.org/xml-soap"


def _local(tag):
    return tag.rsplit("}", 1)[-1]


def _xsi_type(elem):
    value = elem.get("{%s}type" % XSI)
    return value.rsplit(":", 1)[-1] if value else None


def _to_seconds(millis):
    """Soaplab times are milliseconds, possibly untyped; anything not positive is not available."""
    try:
        millis = int(millis)
    except (TypeError, ValueError):
        logger.debug("Unusable job time {!r}".format(millis))
        return -1
    return millis / 1000.0 if millis > 0 else -1


class SoapEnvelope:
    """Encode a SOAP request and decode the value returned by a SOAP response."""

    def __init__(self, namespace, operation):
        self.namespace = namespace
        self.operation = operation
        self._refs = {}

    def encode(self, *args):
        envelope = ET.Element(
            "{%s}Envelope" % SOAP_ENV, {"{%s}encodingStyle" % SOAP_ENV: SOAP_ENC}
        )
        body = ET.SubElement(envelope, "{%s}Body" % SOAP_ENV)
        call = ET.SubElement(body, "{%s}%s" % (self.namespace, self.operation))
        for i, arg in enumerate(args):
            self._encode_value(call, "arg{}".format(i), arg)
        return ET.tostring(envelope, encoding="utf-8")

    def _encode_value(self, parent, tag, value):
        elem = ET.SubElement(parent, tag)
        if value is None:
            elem.set("{%s}nil" % XSI, "true")
        elif isinstance(value, dict):
            elem.set("{%s}type" % XSI, ET.QName(APACHE_SOAP, "Map"))
            for key, item_value in value.items():
                item = ET.SubElement(elem, "item")
                self._encode_value(item, "key", str(key))
                self._encode_value(item, "value", item_value)
        elif isinstance(value, (list, tuple)):
            elem.set("{%s}type" % XSI, ET.QName(SOAP_ENC, "Array"))
            for item_value in value:
                self._encode_value(elem, "item", item_value)
        elif isinstance(value, bytes):
            elem.set("{%s}type" % XSI, ET.QName(XSD, "base64Binary"))
            elem.text = base64.b64encode(value).decode("ascii")
        elif isinstance(value, bool):
            elem.set("{%s}type" % XSI, ET.QName(XSD, "boolean"))
            elem.text = "true" if value else "false"
        elif isinstance(value, int):
            elem.set("{%s}type" % XSI, ET.QName(XSD, "long"))
            elem.text = str(value)
        else:
            elem.set("{%s}type" % XSI, ET.QName(XSD, "string"))
            elem.text = str(value)

    def decode(self, content):
        """
        :param content: the HTTP response body
        :return: the decoded return value of the operation
        :raises TransportError: on a SOAP fault or an unparsable response
        """
        try:
            root = ET.fromstring(content)
        except ET.ParseError as e:
            raise TransportError(
                "Unparsable response to '{}': {}".format(self.operation, e), cause=e
            )
        body = root.find("{%s}Body" % SOAP_ENV)
        if body is None:
            raise TransportError("No SOAP body in the response to '{}'".format(self.operation))

        fault = body.find("{%s}Fault" % SOAP_ENV)
        if fault is not None:
            raise TransportError(
                "SOAP fault in '{}': {}".format(
                    self.operation, fault.findtext("faultstring", default="").strip()
                )
            )

        self._refs = {
            elem.get("id"): elem for elem in body.iter() if elem.get("id") is not None
        }
        children = [c for c in body if c.get("id") is None]
        if not children:
            return None
        returns = list(children[0])
        if not returns:
            return None
        try:
            return self._decode_value(returns[0])
        except (KeyError, ValueError) as e:
            raise TransportError(
                "Malformed response to '{}': {}".format(self.operation, e), cause=e
            )

    def _decode_value(self, elem):
        href = elem.get("href")
        if href is not None and href.startswith("#"):
            elem = self._refs[href[1:]]
        if elem.get("{%s}nil" % XSI) in ("true", "1"):
            return None

        xsi_type = _xsi_type(elem)
        children = list(elem)
        if xsi_type in ("base64Binary", "base64"):
            return base64.b64decode(elem.text or "")
        if children:
            if all(_local(c.tag) == "item" and c.find("key") is not None for c in children):
                return {
                    self._decode_value(c.find("key")): self._decode_value(c.find("value"))
                    for c in children
                }
            if xsi_type == "Array" or all(_local(c.tag) == "item" for c in children):
                return [self._decode_value(c) for c in children]
            return {_local(c.tag): self._decode_value(c) for c in children}

        text = elem.text or ""
        if xsi_type in ("long", "int", "short", "integer"):
            return int(text)
        if xsi_type in ("double", "float"):
            return float(text)
        if xsi_type == "boolean":
            return text.strip() in ("true", "1")
        return text


class SoapAccess(AccessProtocol):

    name = "soap"

    STATUS_MAP = {
        "CREATED": JobStatus.CREATED,
        "RUNNING": JobStatus.RUNNING,
        "COMPLETED": JobStatus.COMPLETED,
        "TERMINATED_BY_REQUEST": JobStatus.TERMINATED,
        "TERMINATED_BY_ERROR": JobStatus.FAILED,
        "UNKNOWN": JobStatus.UNKNOWN,
    }

    def __init__(self, location, http_proxy=None, timeout=120, session=None, **kwargs):
        super().__init__(location, http_proxy=http_proxy, timeout=timeout, **kwargs)
        self.session = session or requests.Session()
        self.proxies = (
            {"http": http_proxy, "https": http_proxy} if http_proxy else None
        )

    def endpoint(self, analysis_name):
        return "{}/{}".format(self.location.rstrip("/"), analysis_name)

    def endpoint_for_job(self, job_id):
        analysis_name, sep, _ = job_id.partition("/")
        if not sep:
            raise TransportError("Malformed job id '{}'".format(job_id))
        return self.endpoint(analysis_name)

    @log("SOAP call: {}", logger, func_arg=2, debug=True)
    def call(self, endpoint, operation, *args):
        envelope = SoapEnvelope(endpoint, operation)
        try:
            response = self.session.post(
                endpoint,
                data=envelope.encode(*args),
                headers={"Content-Type": "text/xml; charset=utf-8", "SOAPAction": '""'},
                proxies=self.proxies,
                timeout=self.timeout or None,
            )
        except requests.RequestException as e:
            raise TransportError(
                "Cannot reach {} ({})".format(endpoint, e), cause=e
            ) from e

        # faults come back with HTTP 500 and a SOAP body
        if response.status_code >= 400 and b"Fault" not in response.content:
            raise TransportError(
                "Call '{}' to {} failed with HTTP status {}".format(
                    operation, endpoint, response.status_code
                )
            )
        return envelope.decode(response.content)

    def submit(self, analysis_name, inputs):
        job_id = self.call(self.endpoint(analysis_name), "createAndRun", inputs)
        if not job_id:
            raise TransportError("Service {} did not return a job id".format(analysis_name))
        if not job_id.startswith(analysis_name + "/"):
            job_id = "{}/{}".format(analysis_name, job_id)
        return job_id

    def status(self, job_id):
        status = self.call(self.endpoint_for_job(job_id), "getStatus", job_id)
        return type(self).STATUS_MAP.get(status, JobStatus.UNKNOWN)

    def fetch_result(self, job_id, name):
        results = self.call(self.endpoint_for_job(job_id), "getSomeResults", job_id, [name])
        return (results or {}).get(name)

    def fetch_all_results(self, job_id):
        return self.call(self.endpoint_for_job(job_id), "getResults", job_id) or {}

    def release(self, job_id):
        self.call(self.endpoint_for_job(job_id), "destroy", job_id)

    def terminate(self, job_id):
        self.call(self.endpoint_for_job(job_id), "terminate", job_id)

    def last_event(self, job_id):
        return self.call(self.endpoint_for_job(job_id), "getLastEvent", job_id)

    def job_times(self, job_id):
        endpoint = self.endpoint_for_job(job_id)
        times = {}
        for key, operation in (
            ("created", "getCreated"),
            ("started", "getStarted"),
            ("ended", "getEnded"),
            ("elapsed", "getElapsed"),
        ):
            times[key] = _to_seconds(self.call(endpoint, operation, job_id))
        return times

    def describe(self, analysis_name):
        return self.call(self.endpoint(analysis_name), "describe")

    def analysis_spec(self, analysis_name):
        return self.call(self.endpoint(analysis_name), "getAnalysisType") or {}

    def input_spec(self, analysis_name):
        spec = self.call(self.endpoint(analysis_name), "getInputSpec") or []
        return {item["name"]: item for item in spec}

    def result_spec(self, analysis_name):
        spec = self.call(self.endpoint(analysis_name), "getResultSpec") or []
        return {item["name"]: item.get("type") for item in spec}


register_access_protocol(SoapAccess.name, SoapAccess)
